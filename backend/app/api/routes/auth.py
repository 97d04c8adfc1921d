from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import find_staff_for_user, get_current_user, get_db
from app.core.security import create_access_token, verify_password
from app.db.session import transaction
from app.models.access_log import AccessLog
from app.models.user import User, UserRole
from app.schemas.user import Token, UserLogin, UserOut

router = APIRouter()
logger = logging.getLogger(__name__)

DASHBOARD_URLS = {
    UserRole.admin: "/admin-dashboard.html",
    UserRole.staff: "/staff-dashboard.html",
}


def _record_access(db: Session, request: Request, *, user_id: str | None, is_successful: bool) -> None:
    with transaction(db):
        db.add(
            AccessLog(
                user_id=user_id,
                ip_address=request.client.host if request.client else None,
                user_agent=request.headers.get("user-agent"),
                is_successful=is_successful,
            )
        )


@router.post("/login", response_model=Token)
def login(payload: UserLogin, request: Request, db: Session = Depends(get_db)) -> Token:
    user = db.execute(select(User).where(User.email == payload.email)).scalar_one_or_none()
    if user is None or not verify_password(payload.password, user.hashed_password):
        _record_access(db, request, user_id=user.id if user else None, is_successful=False)
        logger.info("Failed login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is inactive")

    _record_access(db, request, user_id=user.id, is_successful=True)
    token = create_access_token(user.id, extra_claims={"role": user.role.value})
    return Token(access_token=token, role=user.role, redirect_url=DASHBOARD_URLS[user.role])


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    with transaction(db):
        latest = db.execute(
            select(AccessLog)
            .where(
                AccessLog.user_id == current_user.id,
                AccessLog.is_successful.is_(True),
                AccessLog.logout_time.is_(None),
            )
            .order_by(AccessLog.login_time.desc())
            .limit(1)
        ).scalar_one_or_none()
        if latest is not None:
            latest.logout_time = datetime.now(timezone.utc)
    return {"success": True}


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> UserOut:
    staff = find_staff_for_user(db, current_user)
    return UserOut(
        id=current_user.id,
        name=current_user.name,
        email=current_user.email,
        role=current_user.role,
        is_active=current_user.is_active,
        staff_id=staff.id if staff is not None else None,
        created_at=current_user.created_at,
    )
