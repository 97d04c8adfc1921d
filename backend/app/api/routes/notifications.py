from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.models.notification import NotificationType
from app.models.user import User
from app.schemas.notification import NotificationOut, NotificationSummary
from app.services.notifications import count_unread, list_notifications, mark_all_read, mark_notification_read

router = APIRouter()


@router.get("/notifications", response_model=list[NotificationOut])
def list_user_notifications(
    notification_type: NotificationType | None = Query(default=None),
    is_read: bool | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[NotificationOut]:
    return list_notifications(
        db,
        current_user.id,
        notification_type=notification_type,
        is_read=is_read,
        limit=limit,
        offset=offset,
    )


@router.post("/notifications/{notification_id}/read", response_model=NotificationOut)
def mark_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NotificationOut:
    return mark_notification_read(db, notification_id, current_user.id)


@router.get("/notifications/unread-count", response_model=NotificationSummary)
def unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NotificationSummary:
    return NotificationSummary(unread=count_unread(db, current_user.id))


@router.post("/notifications/read-all", response_model=NotificationSummary)
def read_all(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NotificationSummary:
    marked = mark_all_read(db, current_user.id)
    return NotificationSummary(unread=count_unread(db, current_user.id), marked_read=marked)
