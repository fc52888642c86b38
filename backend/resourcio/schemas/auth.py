from typing import Optional

from resourcio.schemas.common import CamelModel


class LoginRequest(CamelModel):
    email: str
    password: str


class CurrentUser(CamelModel):
    id: Optional[int] = None
    email: Optional[str] = None
    resource_id: Optional[int] = None
    roles: list[str]
    permissions: list[str]


class LoginResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: CurrentUser
