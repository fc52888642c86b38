from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from resourcio.models.resource import DEFAULT_DEPARTMENT
from resourcio.schemas.common import CamelModel


class ResourceCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    role: str = ""
    department: str = DEFAULT_DEPARTMENT
    skills: list[str] = []
    weekly_capacity: float = Field(default=40, ge=1, le=60)
    is_active: bool = True


class ResourceUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    role: Optional[str] = None
    department: Optional[str] = None
    skills: Optional[list[str]] = None
    weekly_capacity: Optional[float] = Field(default=None, ge=1, le=60)
    is_active: Optional[bool] = None


class ResourceResponse(CamelModel):
    id: int
    name: str
    email: str
    role: str
    department: str
    skills: Optional[list[str]] = None
    weekly_capacity: float
    is_active: bool
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ResourceRelationshipsResponse(CamelModel):
    active_allocations: int
    time_entries: int
    projects_as_director: int
    projects_as_change_lead: int
    projects_as_business_lead: int
    weekly_submissions: int
    user_accounts: int
    can_delete: bool
    warnings: list[str]
    suggestions: list[str]


class ResourceDeleteResponse(CamelModel):
    message: str
    deactivated_users: int
    relationships: ResourceRelationshipsResponse


class DepartmentResponse(CamelModel):
    name: str
    resource_count: int
    active_resource_count: int
