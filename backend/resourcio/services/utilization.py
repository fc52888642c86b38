"""
Allocation / utilization engine.

Pure functions over already-fetched records. A record can be an ORM row,
a dict with snake_case or camelCase keys, or any object exposing the same
attributes. Nothing here touches the database or raises for bad data:
malformed records are skipped (and logged), unusable numbers count as 0.

Utilization is measured against *effective* capacity, i.e. weekly
capacity minus a standard allowance for non-project work (meetings,
admin). Allocation hours are weekly rates; a per-ISO-week override map
on the allocation wins over the flat rate for week-specific questions.
"""

import enum
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional

from resourcio import config
from resourcio.config import UtilizationThresholds
from resourcio.services.weeks import to_date, week_bounds

logger = logging.getLogger(__name__)


class UtilizationCategory(str, enum.Enum):
    UNDER_UTILIZED = "under_utilized"
    OPTIMAL = "optimal"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_MISSING = object()


def _field(record: Any, *names: str, default=None):
    """First present value among names (mapping keys or attributes)."""
    for name in names:
        if isinstance(record, dict):
            value = record.get(name, _MISSING)
        else:
            value = getattr(record, name, _MISSING)
        if value is not _MISSING and value is not None:
            return value
    return default


def to_hours(value) -> float:
    """Float hours; None, garbage, NaN, infinities and negatives become 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def _same_id(a, b) -> bool:
    return a is not None and b is not None and str(a) == str(b)


# ── Record accessors ──


def _resource_id(resource):
    return _field(resource, "id", "resource_id", "resourceId")


def _allocation_dates(allocation) -> tuple[Optional[date], Optional[date]]:
    start = to_date(_field(allocation, "start_date", "startDate"))
    end = to_date(_field(allocation, "end_date", "endDate"))
    return start, end


def _weekly_overrides(allocation) -> dict:
    overrides = _field(allocation, "weekly_allocations", "weeklyAllocations", default={})
    return overrides if isinstance(overrides, dict) else {}


def is_active_allocation(allocation) -> bool:
    return str(_field(allocation, "status", default="active")).lower() == "active"


def is_active_resource(resource) -> bool:
    active = bool(_field(resource, "is_active", "isActive", default=True))
    deleted = bool(_field(resource, "is_deleted", "isDeleted", default=False))
    return active and not deleted


def is_valid_resource(resource) -> bool:
    if resource is None or _resource_id(resource) is None:
        logger.warning("Resource missing id, skipping: %r", resource)
        return False
    return True


def is_valid_allocation(allocation) -> bool:
    if allocation is None:
        return False
    alloc_id = _field(allocation, "id")
    resource_id = _field(allocation, "resource_id", "resourceId")
    project_id = _field(allocation, "project_id", "projectId")
    if alloc_id is None or resource_id is None or project_id is None:
        logger.warning(
            "Allocation missing required fields, skipping (id=%s resource=%s project=%s)",
            alloc_id, resource_id, project_id,
        )
        return False
    return True


# ── Core operations ──


def filter_overlapping(allocations: Iterable, range_start, range_end) -> list:
    """Allocations whose [start, end] intersects [range_start, range_end]; any overlap counts."""
    window_start, window_end = to_date(range_start), to_date(range_end)
    if window_start is None or window_end is None:
        return []

    kept = []
    for allocation in allocations:
        start, end = _allocation_dates(allocation)
        if start is None or end is None:
            logger.warning("Allocation %s has unparseable dates, skipping", _field(allocation, "id"))
            continue
        if start <= window_end and end >= window_start:
            kept.append(allocation)
    return kept


def weekly_hours_for(allocation, iso_week_key: str) -> float:
    """Hours an allocation commits for one ISO week ("2025-W34")."""
    overrides = _weekly_overrides(allocation)
    if iso_week_key in overrides:
        return to_hours(overrides[iso_week_key])

    bounds = week_bounds(iso_week_key)
    if bounds is None:
        return 0.0
    monday, sunday = bounds
    start, end = _allocation_dates(allocation)
    if start is None or end is None:
        return 0.0
    if start <= sunday and end >= monday:
        return to_hours(_field(allocation, "allocated_hours", "allocatedHours"))
    return 0.0


def effective_capacity(resource, non_project_hours: Optional[float] = None) -> float:
    if non_project_hours is None:
        non_project_hours = config.NON_PROJECT_HOURS
    weekly_capacity = to_hours(_field(resource, "weekly_capacity", "weeklyCapacity"))
    return max(0.0, weekly_capacity - to_hours(non_project_hours))


def allocated_hours_for(resource_id, allocations: Iterable, week_key: Optional[str] = None) -> float:
    total = 0.0
    for allocation in allocations:
        if not _same_id(_field(allocation, "resource_id", "resourceId"), resource_id):
            continue
        if not is_active_allocation(allocation):
            continue
        if week_key:
            total += weekly_hours_for(allocation, week_key)
        else:
            total += to_hours(_field(allocation, "allocated_hours", "allocatedHours"))
    return total


def utilization(
    resource,
    allocations: Iterable,
    week_key: Optional[str] = None,
    non_project_hours: Optional[float] = None,
) -> float:
    """Percent of effective capacity committed by the resource's active allocations."""
    capacity = effective_capacity(resource, non_project_hours)
    if capacity <= 0:
        return 0.0
    hours = allocated_hours_for(_resource_id(resource), allocations, week_key)
    return hours / capacity * 100


def categorize(utilization_percent, thresholds: Optional[UtilizationThresholds] = None) -> UtilizationCategory:
    t = thresholds or config.THRESHOLDS
    pct = to_hours(utilization_percent)
    if pct >= t.critical:
        return UtilizationCategory.CRITICAL
    if pct >= t.error:
        return UtilizationCategory.ERROR
    if pct >= t.warning:
        return UtilizationCategory.WARNING
    if pct >= t.optimal_min:
        return UtilizationCategory.OPTIMAL
    return UtilizationCategory.UNDER_UTILIZED


# ── Reports ──


@dataclass(frozen=True)
class ResourceUtilization:
    resource_id: Any
    name: str
    department: str
    is_active: bool
    total_allocated_hours: float
    effective_capacity: float
    utilization_percentage: float
    category: UtilizationCategory


@dataclass(frozen=True)
class UtilizationReport:
    resources: list[ResourceUtilization]
    conflicts: int
    available: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    week_key: Optional[str] = None


def conflict_count(rows: Iterable[ResourceUtilization]) -> int:
    return sum(1 for r in rows if r.is_active and r.utilization_percentage > 100)


def available_count(rows: Iterable[ResourceUtilization]) -> int:
    return sum(1 for r in rows if r.is_active and r.utilization_percentage < 100)


def _department_of(resource) -> str:
    return str(_field(resource, "department", default="General"))


def summarize_departments(resources: Iterable, always: Iterable[str] = ()) -> list[tuple[str, int, int]]:
    """(department, resources, active resources) for every department in use, by name."""
    counts = {name: [0, 0] for name in always}
    for resource in reportable_resources(resources):
        entry = counts.setdefault(_department_of(resource), [0, 0])
        entry[0] += 1
        if is_active_resource(resource):
            entry[1] += 1
    return [(name, total, active) for name, (total, active) in sorted(counts.items())]


def reportable_resources(resources: Iterable, department: Optional[str] = None) -> list:
    """Valid, non-deleted resources, optionally restricted to one department."""
    kept = []
    for resource in resources:
        if not is_valid_resource(resource):
            continue
        if bool(_field(resource, "is_deleted", "isDeleted", default=False)):
            continue
        if department and department != "all" and _department_of(resource) != department:
            continue
        kept.append(resource)
    return kept


def build_utilization_report(
    resources: Iterable,
    allocations: Iterable,
    start=None,
    end=None,
    *,
    week_key: Optional[str] = None,
    department: Optional[str] = None,
    thresholds: Optional[UtilizationThresholds] = None,
    non_project_hours: Optional[float] = None,
) -> UtilizationReport:
    start, end = to_date(start), to_date(end)
    if week_key and (start is None or end is None):
        bounds = week_bounds(week_key)
        if bounds is not None:
            start, end = bounds

    candidates = [a for a in allocations if is_valid_allocation(a)]
    if start is not None and end is not None:
        candidates = filter_overlapping(candidates, start, end)

    rows = []
    for resource in reportable_resources(resources, department):
        rid = _resource_id(resource)
        capacity = effective_capacity(resource, non_project_hours)
        hours = allocated_hours_for(rid, candidates, week_key)
        pct = hours / capacity * 100 if capacity > 0 else 0.0
        rows.append(ResourceUtilization(
            resource_id=rid,
            name=str(_field(resource, "name", default="")),
            department=_department_of(resource),
            is_active=is_active_resource(resource),
            total_allocated_hours=round(hours, 2),
            effective_capacity=round(capacity, 2),
            utilization_percentage=round(pct, 2),
            category=categorize(pct, thresholds),
        ))

    return UtilizationReport(
        resources=rows,
        conflicts=conflict_count(rows),
        available=available_count(rows),
        start_date=start,
        end_date=end,
        week_key=week_key,
    )


# ── Dashboard KPIs ──


@dataclass(frozen=True)
class KpiSummary:
    active_projects: int
    total_projects: int
    available_resources: int
    utilization: float
    conflicts: int


def is_project_active_in_period(project, start: Optional[date], end: Optional[date]) -> bool:
    if str(_field(project, "status", default="")).lower() != "active":
        return False
    if start is None or end is None:
        return True
    p_start = to_date(_field(project, "start_date", "startDate"))
    p_end = to_date(_field(project, "end_date", "endDate"))
    if p_start is None or p_end is None:
        return False
    return p_start <= end and p_end >= start


def calculate_kpis(
    resources: Iterable,
    projects: Iterable,
    allocations: Iterable,
    start=None,
    end=None,
    *,
    week_key: Optional[str] = None,
    department: Optional[str] = None,
    thresholds: Optional[UtilizationThresholds] = None,
    non_project_hours: Optional[float] = None,
) -> KpiSummary:
    start, end = to_date(start), to_date(end)
    project_list = [p for p in projects if _field(p, "id") is not None]
    report = build_utilization_report(
        resources, allocations, start, end,
        week_key=week_key, department=department,
        thresholds=thresholds, non_project_hours=non_project_hours,
    )

    total_capacity = sum(r.effective_capacity for r in report.resources)
    total_allocated = sum(r.total_allocated_hours for r in report.resources)
    rate = total_allocated / total_capacity * 100 if total_capacity > 0 else 0.0

    return KpiSummary(
        active_projects=sum(1 for p in project_list if is_project_active_in_period(p, start, end)),
        total_projects=len(project_list),
        available_resources=report.available,
        utilization=round(rate, 1),
        conflicts=report.conflicts,
    )


# ── Capacity alerts ──


ALERT_ORDER = ("critical", "error", "warning", "under_utilized", "unassigned")

ALERT_TITLES = {
    "critical": "Critical Capacity Issues",
    "error": "Over Capacity",
    "warning": "Nearing Capacity",
    "under_utilized": "Under-utilized Resources",
    "unassigned": "Unassigned Resources",
}


@dataclass
class AlertCategory:
    type: str
    title: str
    threshold: Optional[float]
    resources: list[ResourceUtilization] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.resources)


def _alert_type(row: ResourceUtilization) -> Optional[str]:
    if row.category is UtilizationCategory.UNDER_UTILIZED:
        return "unassigned" if row.total_allocated_hours == 0 else "under_utilized"
    if row.category is UtilizationCategory.OPTIMAL:
        return None
    return row.category.value


def build_capacity_alerts(
    report: UtilizationReport,
    thresholds: Optional[UtilizationThresholds] = None,
) -> list[AlertCategory]:
    """Group active resources of a report into alert categories, most severe first."""
    t = thresholds or config.THRESHOLDS
    limits = {
        "critical": t.critical,
        "error": t.error,
        "warning": t.warning,
        "under_utilized": t.optimal_min,
        "unassigned": None,
    }
    buckets = {key: AlertCategory(key, ALERT_TITLES[key], limits[key]) for key in ALERT_ORDER}

    for row in report.resources:
        if not row.is_active:
            continue
        key = _alert_type(row)
        if key:
            buckets[key].resources.append(row)

    categories = []
    for key in ALERT_ORDER:
        bucket = buckets[key]
        if bucket.resources:
            bucket.resources.sort(key=lambda r: r.utilization_percentage, reverse=True)
            categories.append(bucket)
    return categories
