"""Resources router: people, their capacity and soft deletion."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from resourcio.database import commit_or_409
from resourcio.dependencies import get_editable_db, get_repository, require_access
from resourcio.models.resource import Resource
from resourcio.schemas.allocation import AllocationResponse
from resourcio.schemas.resource import (
    ResourceCreate,
    ResourceDeleteResponse,
    ResourceRelationshipsResponse,
    ResourceResponse,
    ResourceUpdate,
)
from resourcio.services.audit import log_action
from resourcio.services.rbac import Principal
from resourcio.services.repository import Repository
from resourcio.services.resources import check_relationships, soft_delete_resource

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resources", tags=["Resources"])


def _get_resource_or_404(db: Session, resource_id: int) -> Resource:
    resource = db.query(Resource).filter(Resource.id == resource_id).first()
    if not resource or resource.is_deleted:
        raise HTTPException(status_code=404, detail="Resource not found")
    return resource


def _email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(Resource).filter(Resource.email == email)
    if exclude_id is not None:
        q = q.filter(Resource.id != exclude_id)
    return q.first() is not None


# ── CRUD ──


@router.get("", response_model=list[ResourceResponse])
def list_resources(
    department: Optional[str] = Query(None),
    include_deleted: bool = Query(False, alias="includeDeleted"),
    repo: Repository = Depends(get_repository),
    _user: Principal = Depends(require_access("resources.read")),
):
    return repo.list_resources(include_deleted=include_deleted, department=department)


@router.post("", response_model=ResourceResponse, status_code=201)
def create_resource(
    body: ResourceCreate,
    db: Session = Depends(get_editable_db),
    user: Principal = Depends(require_access("resources.write")),
):
    email = str(body.email).strip().lower()
    if _email_taken(db, email):
        raise HTTPException(status_code=409, detail="A resource with this email already exists")

    resource = Resource(**body.model_dump(exclude={"email"}), email=email)
    db.add(resource)
    commit_or_409(db, "A resource with this email already exists")
    db.refresh(resource)

    log_action(db, user.user_id, "create", "resource", resource.id, {"name": resource.name})
    return resource


@router.get("/{resource_id}", response_model=ResourceResponse)
def get_resource(
    resource_id: int,
    repo: Repository = Depends(get_repository),
    _user: Principal = Depends(require_access("resources.read")),
):
    resource = repo.get_resource(resource_id)
    if resource is None:
        raise HTTPException(status_code=404, detail="Resource not found")
    return resource


@router.put("/{resource_id}", response_model=ResourceResponse)
def update_resource(
    resource_id: int,
    body: ResourceUpdate,
    db: Session = Depends(get_editable_db),
    user: Principal = Depends(require_access("resources.write")),
):
    resource = _get_resource_or_404(db, resource_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("email") is not None:
        changes["email"] = str(changes["email"]).strip().lower()
        if _email_taken(db, changes["email"], exclude_id=resource_id):
            raise HTTPException(status_code=409, detail="A resource with this email already exists")

    for field, value in changes.items():
        if value is None and field in ("name", "email", "weekly_capacity", "is_active"):
            continue
        setattr(resource, field, value)

    commit_or_409(db, "A resource with this email already exists")
    db.refresh(resource)
    log_action(db, user.user_id, "update", "resource", resource.id, {"fields": sorted(changes)})
    return resource


@router.delete("/{resource_id}", response_model=ResourceDeleteResponse)
def delete_resource(
    resource_id: int,
    db: Session = Depends(get_editable_db),
    user: Principal = Depends(require_access("resources.delete")),
):
    resource = _get_resource_or_404(db, resource_id)
    rel = check_relationships(db, resource_id)

    deactivated = soft_delete_resource(db, resource)
    log_action(
        db, user.user_id, "soft_delete", "resource", resource_id,
        {"name": resource.name, "deactivated_users": deactivated, "warnings": rel.warnings},
        commit=False,
    )
    db.commit()

    return ResourceDeleteResponse(
        message=f"Resource {resource.name} deleted",
        deactivated_users=deactivated,
        relationships=ResourceRelationshipsResponse.model_validate(rel),
    )


# ── Related data ──


@router.get("/{resource_id}/relationships", response_model=ResourceRelationshipsResponse)
def resource_relationships(
    resource_id: int,
    db: Session = Depends(get_editable_db),
    _user: Principal = Depends(require_access("resources.read")),
):
    _get_resource_or_404(db, resource_id)
    return check_relationships(db, resource_id)


@router.get("/{resource_id}/allocations", response_model=list[AllocationResponse])
def resource_allocations(
    resource_id: int,
    status: Optional[str] = Query(None),
    repo: Repository = Depends(get_repository),
    _user: Principal = Depends(require_access("allocations.read")),
):
    if repo.get_resource(resource_id) is None:
        raise HTTPException(status_code=404, detail="Resource not found")
    return repo.list_allocations(resource_id=resource_id, status=status)
