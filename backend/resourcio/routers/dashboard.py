"""
Dashboard router: KPIs, per-resource utilization and capacity alerts.

All three endpoints share one reporting window. `week` (an ISO week key
such as 2025-W34) wins over startDate/endDate and switches utilization to
per-week hours, so weekly overrides on allocations are honoured. A
startDate/endDate pair spanning exactly one Monday..Sunday is treated the
same way. Without either, the current ISO week is reported.
"""

import logging
from dataclasses import asdict
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from resourcio import config
from resourcio.config import UtilizationThresholds
from resourcio.dependencies import get_repository, require_access
from resourcio.schemas.dashboard import (
    AlertCategoryResponse,
    AlertsResponse,
    AlertSummary,
    KpiResponse,
    ResourceUtilizationResponse,
    UtilizationReportResponse,
    UtilizationSummary,
)
from resourcio.services.rbac import Principal
from resourcio.services.repository import Repository
from resourcio.services.utilization import (
    ResourceUtilization,
    build_capacity_alerts,
    build_utilization_report,
    calculate_kpis,
)
from resourcio.services.weeks import iso_week_key, week_bounds

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


class ReportWindow:
    """Query parameters shared by every dashboard endpoint."""

    def __init__(
        self,
        start_date: Optional[date] = Query(None, alias="startDate"),
        end_date: Optional[date] = Query(None, alias="endDate"),
        week: Optional[str] = Query(None, description="ISO week key, e.g. 2025-W34"),
        department: Optional[str] = Query(None),
        optimal_min: Optional[float] = Query(None, alias="optimalMin"),
        optimal_max: Optional[float] = Query(None, alias="optimalMax"),
        warning: Optional[float] = Query(None),
        error: Optional[float] = Query(None),
        critical: Optional[float] = Query(None),
    ):
        self.week_key = None
        if week:
            bounds = week_bounds(week)
            if bounds is None:
                raise HTTPException(status_code=400, detail=f"Invalid week {week!r}; expected e.g. 2025-W34")
            self.week_key = iso_week_key(bounds[0])
            start_date, end_date = bounds
        elif start_date is None and end_date is None:
            monday = date.today() - timedelta(days=date.today().weekday())
            start_date, end_date = monday, monday + timedelta(days=6)
        elif start_date is None or end_date is None:
            raise HTTPException(status_code=400, detail="Provide both startDate and endDate")

        # a window covering exactly one Monday..Sunday is that ISO week
        if self.week_key is None and start_date.weekday() == 0 and end_date == start_date + timedelta(days=6):
            self.week_key = iso_week_key(start_date)

        if start_date > end_date:
            raise HTTPException(status_code=400, detail="startDate must not be after endDate")
        if (end_date - start_date).days > config.MAX_REPORT_RANGE_DAYS:
            raise HTTPException(
                status_code=400,
                detail=f"Date range cannot exceed {config.MAX_REPORT_RANGE_DAYS} days",
            )

        self.start_date = start_date
        self.end_date = end_date
        self.department = department

        # optimalMax and warning are one boundary; either moves both
        if optimal_max is None:
            optimal_max = warning
        elif warning is None:
            warning = optimal_max
        overrides = {
            "optimal_min": optimal_min,
            "optimal_max": optimal_max,
            "warning": warning,
            "error": error,
            "critical": critical,
        }
        merged = {**asdict(config.THRESHOLDS), **{k: v for k, v in overrides.items() if v is not None}}
        try:
            self.thresholds = UtilizationThresholds(**merged)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))


def _row_out(row: ResourceUtilization) -> ResourceUtilizationResponse:
    return ResourceUtilizationResponse(
        resource_id=row.resource_id,
        name=row.name,
        department=row.department,
        is_active=row.is_active,
        total_allocated_hours=row.total_allocated_hours,
        effective_capacity=row.effective_capacity,
        utilization_percentage=row.utilization_percentage,
        category=row.category.value,
    )


def _report(repo: Repository, window: ReportWindow):
    resources = repo.list_resources()
    allocations = repo.list_allocations()
    return build_utilization_report(
        resources, allocations, window.start_date, window.end_date,
        week_key=window.week_key,
        department=window.department,
        thresholds=window.thresholds,
    )


@router.get("/kpis", response_model=KpiResponse)
def kpis(
    window: ReportWindow = Depends(),
    repo: Repository = Depends(get_repository),
    _user: Principal = Depends(require_access("dashboard.read")),
):
    summary = calculate_kpis(
        repo.list_resources(),
        repo.list_projects(),
        repo.list_allocations(),
        window.start_date,
        window.end_date,
        week_key=window.week_key,
        department=window.department,
        thresholds=window.thresholds,
    )
    return KpiResponse(**asdict(summary), start_date=window.start_date, end_date=window.end_date)


@router.get("/utilization", response_model=UtilizationReportResponse)
def utilization_report(
    window: ReportWindow = Depends(),
    repo: Repository = Depends(get_repository),
    _user: Principal = Depends(require_access("dashboard.read")),
):
    report = _report(repo, window)
    return UtilizationReportResponse(
        start_date=report.start_date,
        end_date=report.end_date,
        week_key=report.week_key,
        resources=[_row_out(r) for r in report.resources],
        summary=UtilizationSummary(
            conflicts=report.conflicts,
            available=report.available,
            total_resources=len(report.resources),
        ),
    )


@router.get("/alerts", response_model=AlertsResponse)
def capacity_alerts(
    window: ReportWindow = Depends(),
    repo: Repository = Depends(get_repository),
    _user: Principal = Depends(require_access("dashboard.read")),
):
    report = _report(repo, window)
    categories = build_capacity_alerts(report, window.thresholds)
    counts = {c.type: c.count for c in categories}

    logger.debug("Capacity alerts %s..%s: %s", window.start_date, window.end_date, counts)
    return AlertsResponse(
        start_date=window.start_date,
        end_date=window.end_date,
        categories=[
            AlertCategoryResponse(
                type=c.type,
                title=c.title,
                threshold=c.threshold,
                count=c.count,
                resources=[_row_out(r) for r in c.resources],
            )
            for c in categories
        ],
        summary=AlertSummary(
            total_alerts=sum(counts.values()),
            critical_count=counts.get("critical", 0),
            error_count=counts.get("error", 0),
            warning_count=counts.get("warning", 0),
            under_utilized_count=counts.get("under_utilized", 0),
            unassigned_count=counts.get("unassigned", 0),
        ),
    )
