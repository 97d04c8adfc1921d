from __future__ import annotations

from dataclasses import dataclass
import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError, StorageError
from app.db.session import transaction
from app.models.notification import Notification, NotificationType
from app.models.staff import Staff
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationDraft:
    user_id: str
    notification_type: NotificationType
    title: str
    message: str


def create_notification(
    db: Session,
    *,
    user_id: str,
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.system,
) -> Notification:
    record = Notification(
        user_id=user_id,
        title=title,
        message=message,
        notification_type=notification_type,
    )
    db.add(record)
    db.flush()
    return record


def draft_for_staff(
    db: Session,
    staff_id: str,
    *,
    notification_type: NotificationType,
    title: str,
    message: str,
) -> NotificationDraft | None:
    """Address a notification to the login behind a staff record, if there is an active one."""
    staff = db.get(Staff, staff_id)
    if staff is None or staff.user_id is None:
        return None
    user = db.get(User, staff.user_id)
    if user is None or not user.is_active:
        return None
    return NotificationDraft(
        user_id=user.id,
        notification_type=notification_type,
        title=title,
        message=message,
    )


def drafts_for_role(
    db: Session,
    role: UserRole,
    *,
    notification_type: NotificationType,
    title: str,
    message: str,
    exclude_user_id: str | None = None,
) -> list[NotificationDraft]:
    recipients = db.execute(
        select(User.id).where(User.role == role, User.is_active.is_(True))
    ).scalars()
    return [
        NotificationDraft(user_id=user_id, notification_type=notification_type, title=title, message=message)
        for user_id in recipients
        if user_id != exclude_user_id
    ]


def dispatch_notifications(db: Session, drafts: list[NotificationDraft | None]) -> list[Notification]:
    """Deliver drafts in their own transaction, after the business change committed.

    Delivery is best effort: a failure is logged and the drafts are dropped,
    the already committed change stays in place.
    """
    pending = [draft for draft in drafts if draft is not None]
    if not pending:
        return []
    try:
        with transaction(db):
            return [
                create_notification(
                    db,
                    user_id=draft.user_id,
                    title=draft.title,
                    message=draft.message,
                    notification_type=draft.notification_type,
                )
                for draft in pending
            ]
    except StorageError:
        logger.warning("Dropped %d notification(s) after delivery failure", len(pending))
        return []


def list_notifications(
    db: Session,
    user_id: str,
    *,
    notification_type: NotificationType | None = None,
    is_read: bool | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Notification]:
    query = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
    )
    if notification_type is not None:
        query = query.where(Notification.notification_type == notification_type)
    if is_read is not None:
        query = query.where(Notification.is_read == is_read)
    return list(db.execute(query.offset(offset).limit(limit)).scalars())


def mark_notification_read(db: Session, notification_id: str, user_id: str) -> Notification:
    with transaction(db):
        notification = db.get(Notification, notification_id)
        if notification is None or notification.user_id != user_id:
            raise ResourceNotFoundError("Notification", notification_id)
        notification.is_read = True
    db.refresh(notification)
    return notification


def count_unread(db: Session, user_id: str) -> int:
    return db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
    ).scalar_one()


def mark_all_read(db: Session, user_id: str) -> int:
    with transaction(db):
        result = db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
    db.expire_all()
    return result.rowcount
