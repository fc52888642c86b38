"""
Read access to resources, projects and allocations.

Two implementations share one interface: SqlRepository reads through a
request-scoped SQLAlchemy session, InMemoryRepository serves the bundled
demo dataset. main.py picks one at startup from RESOURCIO_DATA_BACKEND and
`get_repository` hands it to each request.
"""

import copy
import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from resourcio.demo_data import DEMO_ALLOCATIONS, DEMO_PROJECTS, DEMO_RESOURCES
from resourcio.models.allocation import ResourceAllocation
from resourcio.models.project import Project
from resourcio.models.resource import Resource

logger = logging.getLogger(__name__)


class Repository(ABC):
    @abstractmethod
    def list_resources(self, include_deleted: bool = False, department: Optional[str] = None) -> list:
        raise NotImplementedError

    @abstractmethod
    def get_resource(self, resource_id: int):
        raise NotImplementedError

    @abstractmethod
    def list_projects(self, status: Optional[str] = None) -> list:
        raise NotImplementedError

    @abstractmethod
    def get_project(self, project_id: int):
        raise NotImplementedError

    @abstractmethod
    def list_allocations(
        self,
        resource_id: Optional[int] = None,
        project_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list:
        raise NotImplementedError


# ── SQLAlchemy ──


class SqlRepository(Repository):
    def __init__(self, db: Session):
        self.db = db

    def list_resources(self, include_deleted: bool = False, department: Optional[str] = None) -> list:
        q = self.db.query(Resource)
        if not include_deleted:
            q = q.filter(Resource.is_deleted.is_(False))
        if department and department != "all":
            q = q.filter(Resource.department == department)
        return q.order_by(Resource.name).all()

    def get_resource(self, resource_id: int):
        return self.db.query(Resource).filter(Resource.id == resource_id).first()

    def list_projects(self, status: Optional[str] = None) -> list:
        q = self.db.query(Project)
        if status:
            q = q.filter(Project.status == status)
        return q.order_by(Project.start_date.desc(), Project.id).all()

    def get_project(self, project_id: int):
        return self.db.query(Project).filter(Project.id == project_id).first()

    def list_allocations(self, resource_id=None, project_id=None, status=None) -> list:
        q = self.db.query(ResourceAllocation)
        if resource_id is not None:
            q = q.filter(ResourceAllocation.resource_id == resource_id)
        if project_id is not None:
            q = q.filter(ResourceAllocation.project_id == project_id)
        if status:
            q = q.filter(ResourceAllocation.status == status)
        return q.order_by(ResourceAllocation.start_date, ResourceAllocation.id).all()


# ── In-memory ──


def _resource_defaults(row: dict) -> dict:
    out = {
        "role": "",
        "department": "IT Architecture & Delivery",
        "skills": [],
        "weekly_capacity": 40,
        "is_active": True,
        "is_deleted": False,
        "deleted_at": None,
        "created_at": None,
    }
    out.update(row)
    return out


def _project_defaults(row: dict) -> dict:
    out = {
        "description": None,
        "status": "active",
        "priority": "medium",
        "type": "business",
        "director_id": None,
        "change_lead_id": None,
        "business_lead_id": None,
        "estimated_hours": 0,
        "created_at": None,
    }
    out.update(row)
    return out


def _allocation_defaults(row: dict) -> dict:
    out = {"role": None, "status": "active", "weekly_allocations": {}, "created_at": None}
    out.update(row)
    return out


class InMemoryRepository(Repository):
    """Serves plain dicts; each instance owns a private copy of its rows."""

    def __init__(
        self,
        resources: Iterable[dict] = DEMO_RESOURCES,
        projects: Iterable[dict] = DEMO_PROJECTS,
        allocations: Iterable[dict] = DEMO_ALLOCATIONS,
    ):
        self._resources = [_resource_defaults(copy.deepcopy(r)) for r in resources]
        self._projects = [_project_defaults(copy.deepcopy(p)) for p in projects]
        self._allocations = [_allocation_defaults(copy.deepcopy(a)) for a in allocations]
        logger.info(
            "In-memory repository loaded: %d resources, %d projects, %d allocations",
            len(self._resources), len(self._projects), len(self._allocations),
        )

    def list_resources(self, include_deleted: bool = False, department: Optional[str] = None) -> list:
        rows = [r for r in self._resources if include_deleted or not r["is_deleted"]]
        if department and department != "all":
            rows = [r for r in rows if r["department"] == department]
        return copy.deepcopy(sorted(rows, key=lambda r: r["name"]))

    def get_resource(self, resource_id: int):
        for r in self._resources:
            if r["id"] == resource_id:
                return copy.deepcopy(r)
        return None

    def list_projects(self, status: Optional[str] = None) -> list:
        rows = [p for p in self._projects if not status or p["status"] == status]
        rows.sort(key=lambda p: (-(p["start_date"] or date.min).toordinal(), p["id"]))
        return copy.deepcopy(rows)

    def get_project(self, project_id: int):
        for p in self._projects:
            if p["id"] == project_id:
                return copy.deepcopy(p)
        return None

    def list_allocations(self, resource_id=None, project_id=None, status=None) -> list:
        rows = [
            a for a in self._allocations
            if (resource_id is None or a["resource_id"] == resource_id)
            and (project_id is None or a["project_id"] == project_id)
            and (not status or a["status"] == status)
        ]
        rows.sort(key=lambda a: (a["start_date"], a["id"]))
        return copy.deepcopy(rows)


def build_repository(backend: str) -> Optional[Repository]:
    """Shared repository for the 'memory' backend; None means per-request SQL."""
    if backend == "memory":
        return InMemoryRepository()
    if backend != "database":
        raise ValueError(f"Unknown RESOURCIO_DATA_BACKEND {backend!r} (expected 'database' or 'memory')")
    return None
