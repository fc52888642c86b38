import re
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from resourcio.schemas.common import CamelModel


class RoleInfo(CamelModel):
    role: str
    display_name: str
    description: str
    permissions: list[str]


class PermissionInfo(CamelModel):
    permission: str
    display_name: str
    category: str


class RolesResponse(CamelModel):
    roles: list[RoleInfo]
    permissions: list[PermissionInfo]


class NavigationItem(CamelModel):
    key: str
    label: str
    path: str


class NavigationResponse(CamelModel):
    roles: list[str]
    permissions: list[str]
    items: list[NavigationItem]


class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8)
    resource_id: Optional[int] = None
    roles: list[str] = ["regular_user"]


class UserUpdate(CamelModel):
    email: Optional[EmailStr] = None
    is_active: Optional[bool] = None
    resource_id: Optional[int] = None
    # applied to the linked resource
    department: Optional[str] = Field(None, min_length=1, max_length=200)
    job_role: Optional[str] = Field(None, max_length=200)


_STRONG_PASSWORD = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def check_password_strength(value: str) -> str:
    if not _STRONG_PASSWORD.match(value):
        raise ValueError("Password must contain a lowercase letter, an uppercase letter and a digit")
    return value


class PasswordReset(CamelModel):
    new_password: str = Field(min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def check_strength(cls, value: str) -> str:
        return check_password_strength(value)


class RoleAssign(CamelModel):
    role: str


class UserResponse(CamelModel):
    id: int
    email: str
    resource_id: Optional[int] = None
    is_active: bool
    last_login: Optional[datetime] = None
    roles: list[str]
    permissions: list[str]


class PasswordChange(PasswordReset):
    current_password: str
