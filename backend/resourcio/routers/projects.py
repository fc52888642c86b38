"""Projects router, including the allocations that staff each project."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from resourcio.database import commit_or_409
from resourcio.dependencies import get_editable_db, get_repository, require_access
from resourcio.models.allocation import ResourceAllocation
from resourcio.models.project import Project
from resourcio.models.resource import Resource
from resourcio.schemas.allocation import AllocationCreate, AllocationResponse, WeeklyAllocationsUpdate
from resourcio.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from resourcio.schemas.common import MessageResponse
from resourcio.services.audit import log_action
from resourcio.services.rbac import Principal
from resourcio.services.repository import Repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["Projects"])

_LEAD_FIELDS = ("director_id", "change_lead_id", "business_lead_id")


def _get_project_or_404(db: Session, project_id: int) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def _check_leads(db: Session, values: dict):
    for field in _LEAD_FIELDS:
        resource_id = values.get(field)
        if resource_id is None:
            continue
        exists = db.query(Resource).filter(Resource.id == resource_id, Resource.is_deleted.is_(False)).first()
        if not exists:
            raise HTTPException(status_code=400, detail=f"{field} refers to an unknown resource")


# ── CRUD ──


@router.get("", response_model=list[ProjectResponse])
def list_projects(
    status: Optional[str] = Query(None),
    repo: Repository = Depends(get_repository),
    _user: Principal = Depends(require_access("projects.read")),
):
    return repo.list_projects(status=status)


@router.post("", response_model=ProjectResponse, status_code=201)
def create_project(
    body: ProjectCreate,
    db: Session = Depends(get_editable_db),
    user: Principal = Depends(require_access("projects.write")),
):
    values = body.model_dump()
    _check_leads(db, values)

    project = Project(**values)
    db.add(project)
    db.commit()
    db.refresh(project)

    log_action(db, user.user_id, "create", "project", project.id, {"name": project.name})
    return project


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: int,
    repo: Repository = Depends(get_repository),
    _user: Principal = Depends(require_access("projects.read")),
):
    project = repo.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: int,
    body: ProjectUpdate,
    db: Session = Depends(get_editable_db),
    user: Principal = Depends(require_access("projects.write")),
):
    project = _get_project_or_404(db, project_id)
    changes = body.model_dump(exclude_unset=True)
    _check_leads(db, changes)

    start = changes.get("start_date") or project.start_date
    end = changes.get("end_date") or project.end_date
    if start > end:
        raise HTTPException(status_code=400, detail="startDate must not be after endDate")

    for field, value in changes.items():
        if value is None and field not in _LEAD_FIELDS + ("description", "estimated_hours"):
            continue
        setattr(project, field, value)

    db.commit()
    db.refresh(project)
    log_action(db, user.user_id, "update", "project", project.id, {"fields": sorted(changes)})
    return project


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: int,
    db: Session = Depends(get_editable_db),
    user: Principal = Depends(require_access("projects.delete")),
):
    project = _get_project_or_404(db, project_id)

    active = (
        db.query(ResourceAllocation)
        .filter(ResourceAllocation.project_id == project_id, ResourceAllocation.status == "active")
        .count()
    )
    if active:
        raise HTTPException(
            status_code=409,
            detail=f"Project has {active} active allocation(s); complete or remove them first",
        )

    name = project.name
    db.query(ResourceAllocation).filter(ResourceAllocation.project_id == project_id).delete()
    db.delete(project)
    log_action(db, user.user_id, "delete", "project", project_id, {"name": name}, commit=False)
    db.commit()
    return MessageResponse(message=f"Project {name} deleted")


# ── Allocations ──


@router.get("/{project_id}/allocations", response_model=list[AllocationResponse])
def project_allocations(
    project_id: int,
    status: Optional[str] = Query(None),
    repo: Repository = Depends(get_repository),
    _user: Principal = Depends(require_access("allocations.read")),
):
    if repo.get_project(project_id) is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return repo.list_allocations(project_id=project_id, status=status)


@router.post("/{project_id}/allocations", response_model=AllocationResponse, status_code=201)
def create_allocation(
    project_id: int,
    body: AllocationCreate,
    db: Session = Depends(get_editable_db),
    user: Principal = Depends(require_access("allocations.write")),
):
    _get_project_or_404(db, project_id)

    resource = db.query(Resource).filter(Resource.id == body.resource_id).first()
    if not resource or resource.is_deleted:
        raise HTTPException(status_code=404, detail="Resource not found")
    if not resource.is_active:
        raise HTTPException(status_code=400, detail="Cannot allocate an inactive resource")

    allocation = ResourceAllocation(project_id=project_id, **body.model_dump())
    db.add(allocation)
    commit_or_409(db, "Allocation conflicts with existing data")
    db.refresh(allocation)

    log_action(
        db, user.user_id, "create", "allocation", allocation.id,
        {"project_id": project_id, "resource_id": body.resource_id, "hours": body.allocated_hours},
    )
    return allocation


@router.put("/{project_id}/weekly-allocations", response_model=list[AllocationResponse])
def update_weekly_allocations(
    project_id: int,
    body: WeeklyAllocationsUpdate,
    db: Session = Depends(get_editable_db),
    user: Principal = Depends(require_access("allocations.write")),
):
    """Replace the per-week hours of the given allocations of this project."""
    _get_project_or_404(db, project_id)

    ids = list(body.allocations)
    rows = (
        db.query(ResourceAllocation)
        .filter(ResourceAllocation.project_id == project_id, ResourceAllocation.id.in_(ids))
        .all()
    )
    by_id = {a.id: a for a in rows}
    missing = [i for i in ids if i not in by_id]
    if missing:
        raise HTTPException(status_code=404, detail=f"Allocation(s) not found in this project: {missing}")

    for alloc_id, weeks in body.allocations.items():
        by_id[alloc_id].weekly_allocations = {k: float(v) for k, v in sorted(weeks.items())}

    db.commit()
    log_action(db, user.user_id, "update_weekly", "project", project_id, {"allocations": ids})

    return (
        db.query(ResourceAllocation)
        .filter(ResourceAllocation.project_id == project_id)
        .order_by(ResourceAllocation.start_date, ResourceAllocation.id)
        .all()
    )
