"""Authentication router: login, current-user lookup and own password change."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from resourcio.database import get_db
from resourcio.dependencies import get_current_user, principal_for_user
from resourcio.models.user import User
from resourcio.schemas.auth import CurrentUser, LoginRequest, LoginResponse
from resourcio.schemas.common import MessageResponse
from resourcio.schemas.rbac import PasswordChange
from resourcio.services.audit import log_action
from resourcio.services.auth import create_access_token, hash_password, verify_password
from resourcio.services.rbac import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _current_user(p: Principal) -> CurrentUser:
    return CurrentUser(
        id=p.user_id,
        email=p.email,
        resource_id=p.resource_id,
        roles=sorted(p.roles),
        permissions=sorted(p.permissions),
    )


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    email = body.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(body.password, user.password_hash):
        logger.info("Failed login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is deactivated")

    user.last_login = datetime.now(timezone.utc)
    db.commit()

    token = create_access_token({"sub": str(user.id)})
    return LoginResponse(access_token=token, user=_current_user(principal_for_user(user)))


@router.get("/me", response_model=CurrentUser)
def me(user: Principal = Depends(get_current_user)):
    return _current_user(user)


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: PasswordChange,
    user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    account = db.query(User).filter(User.id == user.user_id).first() if isinstance(user.user_id, int) else None
    if account is None:
        raise HTTPException(status_code=404, detail="No login account for the current user")
    if not verify_password(body.current_password, account.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    account.password_hash = hash_password(body.new_password)
    log_action(db, account.id, "change_password", "user", account.id, commit=False)
    db.commit()
    return MessageResponse(message="Password changed")
