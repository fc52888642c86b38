from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field, model_validator

from resourcio.schemas.common import CamelModel

ProjectStatus = Literal["draft", "active", "closure", "rejected"]
ProjectPriority = Literal["low", "medium", "high"]
ProjectType = Literal["change", "business"]


class ProjectCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: date
    end_date: date
    status: ProjectStatus = "active"
    priority: ProjectPriority = "medium"
    type: ProjectType = "business"
    director_id: Optional[int] = None
    change_lead_id: Optional[int] = None
    business_lead_id: Optional[int] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate")
        return self


class ProjectUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ProjectStatus] = None
    priority: Optional[ProjectPriority] = None
    type: Optional[ProjectType] = None
    director_id: Optional[int] = None
    change_lead_id: Optional[int] = None
    business_lead_id: Optional[int] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)


class ProjectResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    status: str
    priority: str
    type: str
    director_id: Optional[int] = None
    change_lead_id: Optional[int] = None
    business_lead_id: Optional[int] = None
    estimated_hours: Optional[float] = None
    created_at: Optional[datetime] = None
