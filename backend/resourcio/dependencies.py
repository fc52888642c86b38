"""
Authentication and authorization dependencies.

JWT bearer auth in production. With AUTH_MODE=demo a request without a
token is identified by headers instead:

    X-User-Id       user id (default 1)
    X-User-Roles    comma separated roles (default "admin")
    X-Resource-Id   linked resource id (optional)
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from resourcio import config
from resourcio.database import get_db
from resourcio.models.user import User
from resourcio.services.auth import decode_access_token
from resourcio.services.rbac import ACCESS_RULES, Permission, Principal, can_access_route, has_permission
from resourcio.services.repository import Repository, SqlRepository

logger = logging.getLogger(__name__)

DEMO_USER_ID = 1
DEMO_ROLES = "admin"


def _optional_int(value: Optional[str], header: str) -> Optional[int]:
    if value is None or str(value).strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {header} (must be an integer)")


def principal_for_user(user: User) -> Principal:
    return Principal.from_roles(
        user.role_names,
        user_id=user.id,
        resource_id=user.resource_id,
        email=user.email,
    )


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    x_user_id: Optional[str] = Header(default=None),
    x_user_roles: Optional[str] = Header(default=None),
    x_resource_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> Principal:
    if authorization:
        token = authorization.removeprefix("Bearer ").strip()
        payload = decode_access_token(token) if token else None
        if not payload:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        try:
            user_id = int(payload.get("sub"))
        except (TypeError, ValueError):
            raise HTTPException(status_code=401, detail="Invalid token subject")

        user = db.query(User).filter(User.id == user_id).first()
        if not user or not user.is_active:
            raise HTTPException(status_code=401, detail="User not found or disabled")
        return principal_for_user(user)

    if config.AUTH_MODE == "demo":
        roles = [r.strip() for r in (x_user_roles or DEMO_ROLES).split(",") if r.strip()]
        return Principal.from_roles(
            roles,
            user_id=_optional_int(x_user_id, "X-User-Id") or DEMO_USER_ID,
            resource_id=_optional_int(x_resource_id, "X-Resource-Id"),
        )

    raise HTTPException(status_code=401, detail="Not authenticated")


def require_access(key: str):
    """Dependency factory: 403 unless the caller passes ACCESS_RULES[key]."""
    rule = ACCESS_RULES[key]

    def _check(user: Principal = Depends(get_current_user)) -> Principal:
        if not can_access_route(rule, user):
            logger.info("Access denied to %s for user=%s roles=%s", key, user.user_id, sorted(user.roles))
            raise HTTPException(status_code=403, detail=f"Access denied: {rule.label}")
        return user

    return _check


def ensure_own_resource(user: Principal, resource_id: int):
    """Time data is editable by its owner or a system admin."""
    if user.resource_id == resource_id or has_permission(user, Permission.SYSTEM_ADMIN):
        return
    raise HTTPException(status_code=403, detail="You can only manage your own time entries")


def get_repository(request: Request, db: Session = Depends(get_db)) -> Repository:
    shared = getattr(request.app.state, "repository", None)
    if shared is not None:
        return shared
    return SqlRepository(db)


def get_editable_db(request: Request, db: Session = Depends(get_db)) -> Session:
    """Session for handlers that change or inspect stored rows; refused while demo data is served."""
    if getattr(request.app.state, "repository", None) is not None:
        raise HTTPException(
            status_code=409,
            detail="Demo data is read-only; set RESOURCIO_DATA_BACKEND=database to make changes",
        )
    return db
