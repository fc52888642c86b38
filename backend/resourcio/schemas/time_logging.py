from datetime import date, datetime
from typing import Optional

from pydantic import Field

from resourcio.schemas.common import CamelModel


class TimeEntryIn(CamelModel):
    allocation_id: int
    monday_hours: float = Field(default=0, ge=0, le=24)
    tuesday_hours: float = Field(default=0, ge=0, le=24)
    wednesday_hours: float = Field(default=0, ge=0, le=24)
    thursday_hours: float = Field(default=0, ge=0, le=24)
    friday_hours: float = Field(default=0, ge=0, le=24)
    saturday_hours: float = Field(default=0, ge=0, le=24)
    sunday_hours: float = Field(default=0, ge=0, le=24)
    notes: Optional[str] = None


class WeekEntriesUpdate(CamelModel):
    entries: list[TimeEntryIn]


class TimeEntryResponse(CamelModel):
    id: int
    resource_id: int
    allocation_id: int
    week_start_date: date
    monday_hours: float
    tuesday_hours: float
    wednesday_hours: float
    thursday_hours: float
    friday_hours: float
    saturday_hours: float
    sunday_hours: float
    total_hours: float
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None


class WeeklySubmissionResponse(CamelModel):
    id: Optional[int] = None
    resource_id: int
    week_start_date: date
    status: str = "draft"
    submitted_at: Optional[datetime] = None
    total_hours: float = 0


class WeekEntriesResponse(CamelModel):
    resource_id: int
    week_start_date: date
    week_key: str
    is_locked: bool
    entries: list[TimeEntryResponse]


class SubmissionOverviewRow(CamelModel):
    resource_id: int
    resource_name: str
    department: str
    week_start_date: date
    status: str  # "submitted" | "draft" | "not_started"
    submitted_at: Optional[datetime] = None
    total_hours: float = 0


class SubmissionOverviewResponse(CamelModel):
    week_start_date: date
    week_key: str
    submitted: int
    pending: int
    rows: list[SubmissionOverviewRow]
