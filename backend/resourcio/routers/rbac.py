"""RBAC router: role catalogue, navigation for the SPA, user and role administration."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from resourcio.database import commit_or_409, get_db
from resourcio.dependencies import get_current_user, principal_for_user, require_access
from resourcio.models.resource import Resource
from resourcio.models.user import User, UserRole
from resourcio.schemas.common import MessageResponse
from resourcio.schemas.rbac import (
    NavigationItem,
    NavigationResponse,
    PasswordReset,
    PermissionInfo,
    RoleAssign,
    RoleInfo,
    RolesResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from resourcio.services.audit import log_action
from resourcio.services.auth import hash_password
from resourcio.services.rbac import (
    PERMISSION_CATEGORIES,
    PERMISSION_DISPLAY_NAMES,
    ROLE_DESCRIPTIONS,
    ROLE_DISPLAY_NAMES,
    Principal,
    Role,
    accessible_navigation,
    is_known_role,
    permissions_for_role,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rbac", tags=["RBAC"])


def _user_out(user: User) -> UserResponse:
    p = principal_for_user(user)
    return UserResponse(
        id=user.id,
        email=user.email,
        resource_id=user.resource_id,
        is_active=user.is_active,
        last_login=user.last_login,
        roles=sorted(p.roles),
        permissions=sorted(p.permissions),
    )


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _actor_id(db: Session, actor: Principal):
    # demo-mode callers need not exist in the users table
    if isinstance(actor.user_id, int) and db.query(User.id).filter(User.id == actor.user_id).first():
        return actor.user_id
    return None


def _check_role(role: str):
    if not is_known_role(role):
        raise HTTPException(
            status_code=400,
            detail=f"Unknown role {role!r}; expected one of {[r.value for r in Role]}",
        )


def _linkable_resource_or_error(db: Session, resource_id: int) -> Resource:
    resource = db.query(Resource).filter(Resource.id == resource_id, Resource.is_deleted.is_(False)).first()
    if not resource:
        raise HTTPException(status_code=404, detail="Resource not found")
    if db.query(User).filter(User.resource_id == resource_id).first():
        raise HTTPException(status_code=409, detail="Resource is already linked to a user")
    return resource


# ── Catalogue ──


@router.get("/roles", response_model=RolesResponse)
def list_roles(_user: Principal = Depends(get_current_user)):
    category_of = {p: cat for cat, perms in PERMISSION_CATEGORIES.items() for p in perms}
    return RolesResponse(
        roles=[
            RoleInfo(
                role=role.value,
                display_name=ROLE_DISPLAY_NAMES[role],
                description=ROLE_DESCRIPTIONS[role],
                permissions=sorted(permissions_for_role(role)),
            )
            for role in Role
        ],
        permissions=[
            PermissionInfo(permission=p.value, display_name=name, category=category_of.get(p, "other"))
            for p, name in PERMISSION_DISPLAY_NAMES.items()
        ],
    )


@router.get("/navigation", response_model=NavigationResponse)
def navigation(user: Principal = Depends(get_current_user)):
    """Sidebar items the caller may open; the same rules guard the API."""
    return NavigationResponse(
        roles=sorted(user.roles),
        permissions=sorted(user.permissions),
        items=[NavigationItem(key=key, label=rule.label, path=rule.path) for key, rule in accessible_navigation(user)],
    )


# ── Users ──


@router.get("/users", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    _user: Principal = Depends(require_access("rbac.read")),
):
    return [_user_out(u) for u in db.query(User).order_by(User.email).all()]


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(
    body: UserCreate,
    db: Session = Depends(get_db),
    actor: Principal = Depends(require_access("users.manage")),
):
    email = str(body.email).strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail="A user with this email already exists")

    roles = sorted(set(body.roles)) or [Role.REGULAR_USER.value]
    for role in roles:
        _check_role(role)

    if body.resource_id is not None:
        _linkable_resource_or_error(db, body.resource_id)

    user = User(email=email, password_hash=hash_password(body.password), resource_id=body.resource_id)
    assigned_by = _actor_id(db, actor)
    user.role_assignments = [UserRole(role=r, assigned_by=assigned_by) for r in roles]
    db.add(user)
    commit_or_409(db, "A user with this email or resource already exists")
    db.refresh(user)

    log_action(db, actor.user_id, "create", "user", user.id, {"email": email, "roles": roles})
    return _user_out(user)


@router.post("/users/{user_id}/roles", response_model=UserResponse)
def assign_role(
    user_id: int,
    body: RoleAssign,
    db: Session = Depends(get_db),
    actor: Principal = Depends(require_access("rbac.manage")),
):
    _check_role(body.role)
    user = _get_user_or_404(db, user_id)
    if body.role in user.role_names:
        raise HTTPException(status_code=409, detail=f"User already has role {body.role}")

    db.add(UserRole(user_id=user.id, role=body.role, assigned_by=_actor_id(db, actor)))
    log_action(db, actor.user_id, "assign_role", "user", user.id, {"role": body.role}, commit=False)
    commit_or_409(db, f"User already has role {body.role}")
    db.refresh(user)
    return _user_out(user)


@router.delete("/users/{user_id}/roles/{role}", response_model=UserResponse)
def remove_role(
    user_id: int,
    role: str,
    db: Session = Depends(get_db),
    actor: Principal = Depends(require_access("rbac.manage")),
):
    user = _get_user_or_404(db, user_id)
    assignment = next((a for a in user.role_assignments if a.role == role), None)
    if assignment is None:
        raise HTTPException(status_code=404, detail=f"User does not have role {role}")
    if role == Role.ADMIN.value and actor.user_id == user.id:
        raise HTTPException(status_code=400, detail="You cannot remove your own admin role")

    user.role_assignments.remove(assignment)
    log_action(db, actor.user_id, "remove_role", "user", user.id, {"role": role}, commit=False)
    db.commit()
    db.refresh(user)
    return _user_out(user)


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdate,
    db: Session = Depends(get_db),
    actor: Principal = Depends(require_access("users.manage")),
):
    user = _get_user_or_404(db, user_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("is_active") is False and actor.user_id == user.id:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    if changes.get("email") is not None:
        email = str(changes["email"]).strip().lower()
        if db.query(User).filter(User.email == email, User.id != user.id).first():
            raise HTTPException(status_code=409, detail="A user with this email already exists")
        user.email = email

    if "resource_id" in changes and changes["resource_id"] != user.resource_id:
        resource_id = changes["resource_id"]
        if resource_id is not None:
            _linkable_resource_or_error(db, resource_id)
        user.resource_id = resource_id

    if changes.get("is_active") is not None:
        user.is_active = changes["is_active"]

    profile = {k: changes[k] for k in ("department", "job_role") if changes.get(k) is not None}
    if profile:
        if user.resource_id is None:
            raise HTTPException(status_code=400, detail="User has no linked resource to update")
        resource = db.query(Resource).filter(Resource.id == user.resource_id).first()
        if "department" in profile:
            resource.department = profile["department"]
        if "job_role" in profile:
            resource.role = profile["job_role"]

    log_action(db, actor.user_id, "update", "user", user.id, {"fields": sorted(changes)}, commit=False)
    commit_or_409(db, "A user with this email or resource already exists")
    db.refresh(user)
    return _user_out(user)


@router.delete("/users/{user_id}", response_model=UserResponse)
def deactivate_user(
    user_id: int,
    db: Session = Depends(get_db),
    actor: Principal = Depends(require_access("users.manage")),
):
    """Deactivate a login and its linked resource. Rows and role history are kept."""
    if actor.user_id == user_id:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")
    user = _get_user_or_404(db, user_id)
    if not user.is_active:
        raise HTTPException(status_code=400, detail="User is already deactivated")

    user.is_active = False
    if user.resource_id is not None:
        resource = db.query(Resource).filter(Resource.id == user.resource_id).first()
        if resource is not None:
            resource.is_active = False

    log_action(db, actor.user_id, "deactivate", "user", user.id, {"email": user.email}, commit=False)
    db.commit()
    db.refresh(user)
    logger.info("User %s deactivated by %s", user.email, actor.user_id)
    return _user_out(user)


@router.put("/users/{user_id}/password", response_model=MessageResponse)
def reset_password(
    user_id: int,
    body: PasswordReset,
    db: Session = Depends(get_db),
    actor: Principal = Depends(require_access("users.manage")),
):
    if actor.user_id == user_id:
        raise HTTPException(status_code=400, detail="Use /api/auth/change-password to change your own password")
    user = _get_user_or_404(db, user_id)

    user.password_hash = hash_password(body.new_password)
    log_action(db, actor.user_id, "reset_password", "user", user.id, {"email": user.email}, commit=False)
    db.commit()
    return MessageResponse(message=f"Password updated for {user.email}")
