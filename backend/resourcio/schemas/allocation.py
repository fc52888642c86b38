from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator

from resourcio.schemas.common import CamelModel
from resourcio.services.weeks import parse_week_key

AllocationStatus = Literal["active", "planned", "completed"]


def _check_weekly(value: Optional[dict]) -> Optional[dict]:
    if value is None:
        return value
    for key, hours in value.items():
        if parse_week_key(key) is None:
            raise ValueError(f"invalid ISO week key {key!r} (expected e.g. 2025-W34)")
        if hours is None or hours < 0:
            raise ValueError(f"hours for {key} must be >= 0")
    return value


class AllocationCreate(CamelModel):
    resource_id: int
    allocated_hours: float = Field(ge=0, le=168)
    start_date: date
    end_date: date
    role: Optional[str] = None
    status: AllocationStatus = "active"
    weekly_allocations: dict[str, float] = {}

    @field_validator("weekly_allocations")
    @classmethod
    def check_weekly(cls, value):
        return _check_weekly(value)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate")
        return self


class AllocationUpdate(CamelModel):
    allocated_hours: Optional[float] = Field(default=None, ge=0, le=168)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    role: Optional[str] = None
    status: Optional[AllocationStatus] = None
    weekly_allocations: Optional[dict[str, float]] = None

    @field_validator("weekly_allocations")
    @classmethod
    def check_weekly(cls, value):
        return _check_weekly(value)


class WeeklyAllocationsUpdate(CamelModel):
    """Per-week hours for several allocations of one project: {allocationId: {"2025-W34": 8}}."""

    allocations: dict[int, dict[str, float]]

    @field_validator("allocations")
    @classmethod
    def check_weeks(cls, value):
        for weeks in value.values():
            _check_weekly(weeks)
        return value


class AllocationResponse(CamelModel):
    id: int
    project_id: int
    resource_id: int
    allocated_hours: float
    start_date: date
    end_date: date
    role: Optional[str] = None
    status: str
    weekly_allocations: Optional[dict[str, float]] = None
    created_at: Optional[datetime] = None
