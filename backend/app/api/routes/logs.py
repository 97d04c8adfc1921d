from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_roles
from app.models.access_log import AccessLog
from app.models.user import User, UserRole
from app.schemas.activity import AccessLogOut, ActivityLogOut
from app.services.audit import ACTIVITY_PAGE_LIMIT, list_activity

router = APIRouter()


@router.get("/activity-logs", response_model=list[ActivityLogOut])
def list_activity_logs(
    action: str | None = Query(default=None, max_length=100),
    entity_type: str | None = Query(default=None, max_length=50),
    entity_id: str | None = Query(default=None, max_length=36),
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> list[ActivityLogOut]:
    return list_activity(db, action=action, entity_type=entity_type, entity_id=entity_id)


@router.get("/access-logs", response_model=list[AccessLogOut])
def list_access_logs(
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> list[AccessLogOut]:
    rows = db.execute(
        select(AccessLog, User.email, User.role)
        .outerjoin(User, AccessLog.user_id == User.id)
        .order_by(AccessLog.login_time.desc())
        .limit(ACTIVITY_PAGE_LIMIT)
    ).all()
    return [
        AccessLogOut(
            id=log.id,
            user_id=log.user_id,
            email=email,
            role=role.value if role is not None else None,
            login_time=log.login_time,
            logout_time=log.logout_time,
            ip_address=log.ip_address,
            user_agent=log.user_agent,
            is_successful=log.is_successful,
        )
        for log, email, role in rows
    ]
