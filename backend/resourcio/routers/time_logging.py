"""
Time logging router.

Resources log hours per allocation per ISO week, then submit the week.
A submitted week is locked; unsubmitting reopens it. Owners may unsubmit
until UNSUBMIT_GRACE_DAYS after the week's Sunday, system admins always.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from resourcio import config
from resourcio.database import commit_or_409, get_db
from resourcio.dependencies import ensure_own_resource, get_current_user, require_access
from resourcio.models.allocation import ResourceAllocation
from resourcio.models.resource import Resource
from resourcio.models.time_entry import WEEKDAY_COLUMNS, TimeEntry, WeeklySubmission
from resourcio.schemas.time_logging import (
    SubmissionOverviewResponse,
    SubmissionOverviewRow,
    TimeEntryResponse,
    WeekEntriesResponse,
    WeekEntriesUpdate,
    WeeklySubmissionResponse,
)
from resourcio.services.audit import log_action
from resourcio.services.rbac import Permission, Principal, has_any_permission, has_permission
from resourcio.services.weeks import iso_week_key, week_start

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Time Logging"])


# ── helpers ──


def _get_resource_or_404(db: Session, resource_id: int) -> Resource:
    resource = db.query(Resource).filter(Resource.id == resource_id, Resource.is_deleted.is_(False)).first()
    if not resource:
        raise HTTPException(status_code=404, detail="Resource not found")
    return resource


def _ensure_can_view(user: Principal, resource_id: int):
    if user.resource_id == resource_id:
        return
    if has_any_permission(user, (Permission.SUBMISSION_OVERVIEW, Permission.SYSTEM_ADMIN)):
        return
    raise HTTPException(status_code=403, detail="You can only view your own time entries")


def _submission(db: Session, resource_id: int, monday: date):
    return (
        db.query(WeeklySubmission)
        .filter(WeeklySubmission.resource_id == resource_id, WeeklySubmission.week_start_date == monday)
        .first()
    )


def _week_entries(db: Session, resource_id: int, monday: date) -> list[TimeEntry]:
    return (
        db.query(TimeEntry)
        .filter(TimeEntry.resource_id == resource_id, TimeEntry.week_start_date == monday)
        .order_by(TimeEntry.allocation_id)
        .all()
    )


def _entry_out(entry: TimeEntry) -> TimeEntryResponse:
    return TimeEntryResponse(
        id=entry.id,
        resource_id=entry.resource_id,
        allocation_id=entry.allocation_id,
        week_start_date=entry.week_start_date,
        **{col: float(getattr(entry, col) or 0) for col in WEEKDAY_COLUMNS},
        total_hours=round(entry.total_hours, 2),
        notes=entry.notes,
        updated_at=entry.updated_at,
    )


def _week_out(db: Session, resource_id: int, monday: date) -> WeekEntriesResponse:
    submission = _submission(db, resource_id, monday)
    return WeekEntriesResponse(
        resource_id=resource_id,
        week_start_date=monday,
        week_key=iso_week_key(monday),
        is_locked=bool(submission and submission.status == "submitted"),
        entries=[_entry_out(e) for e in _week_entries(db, resource_id, monday)],
    )


def _submission_out(submission, resource_id: int, monday: date) -> WeeklySubmissionResponse:
    if submission is None:
        return WeeklySubmissionResponse(resource_id=resource_id, week_start_date=monday)
    return WeeklySubmissionResponse(
        id=submission.id,
        resource_id=submission.resource_id,
        week_start_date=submission.week_start_date,
        status=submission.status,
        submitted_at=submission.submitted_at,
        total_hours=float(submission.total_hours or 0),
    )


def can_unsubmit(user: Principal, resource_id: int, monday: date, today: date | None = None) -> bool:
    if has_permission(user, Permission.SYSTEM_ADMIN):
        return True
    if user.resource_id != resource_id:
        return False
    today = today or date.today()
    deadline = monday + timedelta(days=6 + config.UNSUBMIT_GRACE_DAYS)
    return today <= deadline


# ── Time entries ──


@router.get("/resources/{resource_id}/time-entries/week/{week_start_date}", response_model=WeekEntriesResponse)
def get_week_entries(
    resource_id: int,
    week_start_date: date,
    db: Session = Depends(get_db),
    user: Principal = Depends(require_access("time.log")),
):
    _ensure_can_view(user, resource_id)
    _get_resource_or_404(db, resource_id)
    return _week_out(db, resource_id, week_start(week_start_date))


@router.put("/resources/{resource_id}/time-entries/week/{week_start_date}", response_model=WeekEntriesResponse)
def save_week_entries(
    resource_id: int,
    week_start_date: date,
    body: WeekEntriesUpdate,
    db: Session = Depends(get_db),
    user: Principal = Depends(require_access("time.log")),
):
    ensure_own_resource(user, resource_id)
    _get_resource_or_404(db, resource_id)
    monday = week_start(week_start_date)

    submission = _submission(db, resource_id, monday)
    if submission and submission.status == "submitted":
        raise HTTPException(status_code=409, detail="Week is submitted; unsubmit it before editing")

    alloc_ids = {e.allocation_id for e in body.entries}
    owned = {
        a.id
        for a in db.query(ResourceAllocation)
        .filter(ResourceAllocation.id.in_(list(alloc_ids)), ResourceAllocation.resource_id == resource_id)
        .all()
    }
    foreign = sorted(alloc_ids - owned)
    if foreign:
        raise HTTPException(status_code=400, detail=f"Allocation(s) {foreign} do not belong to this resource")

    existing = {e.allocation_id: e for e in _week_entries(db, resource_id, monday)}
    for item in body.entries:
        entry = existing.get(item.allocation_id)
        if entry is None:
            entry = TimeEntry(resource_id=resource_id, allocation_id=item.allocation_id, week_start_date=monday)
            db.add(entry)
            existing[item.allocation_id] = entry
        for col in WEEKDAY_COLUMNS:
            setattr(entry, col, getattr(item, col))
        entry.notes = item.notes

    total = sum(e.total_hours for e in existing.values())
    if submission is None:
        db.add(WeeklySubmission(resource_id=resource_id, week_start_date=monday, status="draft", total_hours=total))
    else:
        submission.total_hours = total

    commit_or_409(db, "Time entries were changed concurrently; reload and try again")
    logger.info("Saved %d time entries for resource=%s week=%s", len(body.entries), resource_id, monday)
    return _week_out(db, resource_id, monday)


# ── Weekly submissions ──


@router.get(
    "/resources/{resource_id}/weekly-submissions/week/{week_start_date}",
    response_model=WeeklySubmissionResponse,
)
def get_week_submission(
    resource_id: int,
    week_start_date: date,
    db: Session = Depends(get_db),
    user: Principal = Depends(get_current_user),
):
    _ensure_can_view(user, resource_id)
    monday = week_start(week_start_date)
    return _submission_out(_submission(db, resource_id, monday), resource_id, monday)


@router.post("/time-logging/submit/{resource_id}/{week_start_date}", response_model=WeeklySubmissionResponse)
def submit_week(
    resource_id: int,
    week_start_date: date,
    db: Session = Depends(get_db),
    user: Principal = Depends(require_access("time.log")),
):
    ensure_own_resource(user, resource_id)
    _get_resource_or_404(db, resource_id)
    monday = week_start(week_start_date)

    submission = _submission(db, resource_id, monday)
    if submission and submission.status == "submitted":
        raise HTTPException(status_code=409, detail="Week already submitted")

    total = sum(e.total_hours for e in _week_entries(db, resource_id, monday))
    if submission is None:
        submission = WeeklySubmission(resource_id=resource_id, week_start_date=monday)
        db.add(submission)
    submission.status = "submitted"
    submission.submitted_at = datetime.now(timezone.utc)
    submission.total_hours = total

    log_action(
        db, user.user_id, "submit_week", "weekly_submission", f"{resource_id}:{monday}",
        {"resource_id": resource_id, "week": iso_week_key(monday), "total_hours": total},
        commit=False,
    )
    commit_or_409(db, "Week was submitted concurrently")
    db.refresh(submission)
    return _submission_out(submission, resource_id, monday)


@router.post("/time-logging/unsubmit/{resource_id}/{week_start_date}", response_model=WeeklySubmissionResponse)
def unsubmit_week(
    resource_id: int,
    week_start_date: date,
    db: Session = Depends(get_db),
    user: Principal = Depends(require_access("time.log")),
):
    monday = week_start(week_start_date)
    submission = _submission(db, resource_id, monday)
    if not submission or submission.status != "submitted":
        raise HTTPException(status_code=409, detail="Week is not submitted")

    if not can_unsubmit(user, resource_id, monday):
        if user.resource_id != resource_id:
            raise HTTPException(status_code=403, detail="You can only unsubmit your own weeks")
        raise HTTPException(
            status_code=403,
            detail=f"Unsubmit window closed {config.UNSUBMIT_GRACE_DAYS} days after the week ended",
        )

    submission.status = "draft"
    submission.submitted_at = None
    log_action(
        db, user.user_id, "unsubmit_week", "weekly_submission", f"{resource_id}:{monday}",
        {"resource_id": resource_id, "week": iso_week_key(monday)},
        commit=False,
    )
    db.commit()
    db.refresh(submission)
    return _submission_out(submission, resource_id, monday)


# ── Overview ──


def _overview_rows(db: Session, monday: date) -> list[SubmissionOverviewRow]:
    resources = (
        db.query(Resource)
        .filter(Resource.is_deleted.is_(False), Resource.is_active.is_(True))
        .order_by(Resource.name)
        .all()
    )
    submissions = {
        s.resource_id: s
        for s in db.query(WeeklySubmission).filter(WeeklySubmission.week_start_date == monday).all()
    }

    rows = []
    for r in resources:
        s = submissions.get(r.id)
        rows.append(SubmissionOverviewRow(
            resource_id=r.id,
            resource_name=r.name,
            department=r.department,
            week_start_date=monday,
            status=s.status if s else "not_started",
            submitted_at=s.submitted_at if s else None,
            total_hours=float(s.total_hours or 0) if s else 0,
        ))
    return rows


@router.get("/time-logging/submission-overview", response_model=SubmissionOverviewResponse)
def submission_overview(
    week: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    _user: Principal = Depends(require_access("submissions.review")),
):
    monday = week_start(week or date.today())
    rows = _overview_rows(db, monday)
    submitted = sum(1 for r in rows if r.status == "submitted")
    return SubmissionOverviewResponse(
        week_start_date=monday,
        week_key=iso_week_key(monday),
        submitted=submitted,
        pending=len(rows) - submitted,
        rows=rows,
    )


@router.get("/weekly-submissions/pending", response_model=list[SubmissionOverviewRow])
def pending_submissions(
    week: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    _user: Principal = Depends(require_access("submissions.review")),
):
    return [r for r in _overview_rows(db, week_start(week or date.today())) if r.status != "submitted"]
