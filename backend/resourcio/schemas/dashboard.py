from datetime import date
from typing import Optional

from resourcio.schemas.common import CamelModel


class KpiResponse(CamelModel):
    active_projects: int
    total_projects: int
    available_resources: int
    utilization: float
    conflicts: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ResourceUtilizationResponse(CamelModel):
    resource_id: int
    name: str
    department: str
    is_active: bool
    total_allocated_hours: float
    effective_capacity: float
    utilization_percentage: float
    category: str


class UtilizationSummary(CamelModel):
    conflicts: int
    available: int
    total_resources: int


class UtilizationReportResponse(CamelModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    week_key: Optional[str] = None
    resources: list[ResourceUtilizationResponse]
    summary: UtilizationSummary


class AlertCategoryResponse(CamelModel):
    type: str
    title: str
    threshold: Optional[float] = None
    count: int
    resources: list[ResourceUtilizationResponse]


class AlertSummary(CamelModel):
    total_alerts: int
    critical_count: int
    error_count: int
    warning_count: int
    under_utilized_count: int
    unassigned_count: int


class AlertsResponse(CamelModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    categories: list[AlertCategoryResponse]
    summary: AlertSummary
