"""Allocations router: cross-project listing plus edits to single allocations."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from resourcio.dependencies import get_editable_db, get_repository, require_access
from resourcio.models.allocation import ResourceAllocation
from resourcio.schemas.allocation import AllocationResponse, AllocationUpdate
from resourcio.schemas.common import MessageResponse
from resourcio.services.audit import log_action
from resourcio.services.rbac import Principal
from resourcio.services.repository import Repository
from resourcio.services.utilization import filter_overlapping

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/allocations", tags=["Allocations"])


def _get_allocation_or_404(db: Session, allocation_id: int) -> ResourceAllocation:
    allocation = db.query(ResourceAllocation).filter(ResourceAllocation.id == allocation_id).first()
    if not allocation:
        raise HTTPException(status_code=404, detail="Allocation not found")
    return allocation


@router.get("", response_model=list[AllocationResponse])
def list_allocations(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    resource_id: Optional[int] = Query(None, alias="resourceId"),
    status: Optional[str] = Query(None),
    repo: Repository = Depends(get_repository),
    _user: Principal = Depends(require_access("allocations.read")),
):
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="startDate must not be after endDate")

    rows = repo.list_allocations(resource_id=resource_id, status=status)
    if start_date or end_date:
        rows = filter_overlapping(rows, start_date or date.min, end_date or date.max)
    return rows


@router.put("/{allocation_id}", response_model=AllocationResponse)
def update_allocation(
    allocation_id: int,
    body: AllocationUpdate,
    db: Session = Depends(get_editable_db),
    user: Principal = Depends(require_access("allocations.write")),
):
    allocation = _get_allocation_or_404(db, allocation_id)
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None or k == "role"}

    start = changes.get("start_date", allocation.start_date)
    end = changes.get("end_date", allocation.end_date)
    if start > end:
        raise HTTPException(status_code=400, detail="startDate must not be after endDate")

    for field, value in changes.items():
        setattr(allocation, field, value)

    db.commit()
    db.refresh(allocation)
    log_action(db, user.user_id, "update", "allocation", allocation.id, {"fields": sorted(changes)})
    return allocation


@router.delete("/{allocation_id}", response_model=MessageResponse)
def delete_allocation(
    allocation_id: int,
    db: Session = Depends(get_editable_db),
    user: Principal = Depends(require_access("allocations.write")),
):
    allocation = _get_allocation_or_404(db, allocation_id)
    details = {"project_id": allocation.project_id, "resource_id": allocation.resource_id}

    db.delete(allocation)
    log_action(db, user.user_id, "delete", "allocation", allocation_id, details, commit=False)
    db.commit()
    return MessageResponse(message="Allocation deleted")
