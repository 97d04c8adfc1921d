"""Leave requests and their approval workflow.

A leave request moves from ``pending`` to ``approved`` or ``rejected`` exactly
once. Approval writes the leave's attendance rows and the replacement's
schedule assignments in the same transaction as the status change; the
transition itself is a conditional update on ``status = 'pending'`` so two
concurrent reviews of one request cannot both succeed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.exceptions import (
    ConflictError,
    InvalidStateError,
    ResourceNotFoundError,
    ValidationFailedError,
)
from app.db.session import transaction
from app.models.leave_request import LeaveRequest, LeaveStatus, LeaveType
from app.models.notification import NotificationType
from app.models.schedule_assignment import ScheduleAssignment
from app.models.staff import Staff
from app.models.user import User, UserRole
from app.schemas.leave import LeaveRequestCreate
from app.services.assignments import MaterializeResult, materialize_assignments
from app.services.attendance import sync_attendance_for_leave
from app.services.audit import log_activity
from app.services.notifications import (
    NotificationDraft,
    dispatch_notifications,
    draft_for_staff,
    drafts_for_role,
)
from app.services.slots import affected_slots

logger = logging.getLogger(__name__)


@dataclass
class LeaveApprovalResult:
    leave_request: LeaveRequest
    uncovered_dates: list[date] = field(default_factory=list)
    assignments: list[ScheduleAssignment] = field(default_factory=list)


def _describe_leave(leave: LeaveRequest) -> str:
    label = "full day" if leave.leave_type == LeaveType.full_day else f"half day ({leave.session.value})"
    if leave.start_date == leave.end_date:
        return f"{label} leave on {leave.start_date.isoformat()}"
    return f"{label} leave from {leave.start_date.isoformat()} to {leave.end_date.isoformat()}"


def _replacement_message(leave: LeaveRequest, materialized: MaterializeResult) -> str:
    session_note = f" ({leave.session.value} session)" if leave.session else ""
    parts = []
    if materialized.assignments:
        covered_dates = sorted({item.scheduled_date for item in materialized.assignments})
        parts.append(
            f"You have been assigned to cover {len(materialized.assignments)} class(es) on "
            f"{', '.join(item.isoformat() for item in covered_dates)}{session_note}."
        )
    else:
        parts.append(f"You were named as replacement for a {_describe_leave(leave)}.")
    if materialized.uncovered_dates:
        parts.append(
            "You were already booked on "
            f"{', '.join(item.isoformat() for item in materialized.uncovered_dates)}; those days need another replacement."
        )
    return " ".join(parts)


def _load_pending_leave(db: Session, leave_id: str) -> LeaveRequest:
    leave = db.get(LeaveRequest, leave_id)
    if leave is None:
        raise ResourceNotFoundError("LeaveRequest", leave_id)
    if leave.status != LeaveStatus.pending:
        raise InvalidStateError(
            f"Leave request is already {leave.status.value}",
            details={"leave_id": leave.id, "status": leave.status.value},
        )
    return leave


def _transition(
    db: Session,
    leave: LeaveRequest,
    *,
    to_status: LeaveStatus,
    actor: User,
    comments: str | None,
) -> None:
    result = db.execute(
        update(LeaveRequest)
        .where(LeaveRequest.id == leave.id, LeaveRequest.status == LeaveStatus.pending)
        .values(
            status=to_status,
            approved_by_id=actor.id,
            admin_comments=comments,
            reviewed_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InvalidStateError(
            "Leave request was reviewed concurrently",
            details={"leave_id": leave.id},
        )
    db.refresh(leave)


def request_leave(db: Session, *, actor: User, staff: Staff, payload: LeaveRequestCreate) -> LeaveRequest:
    with transaction(db):
        overlapping = db.execute(
            select(LeaveRequest.id).where(
                LeaveRequest.staff_id == staff.id,
                LeaveRequest.status.in_([LeaveStatus.pending, LeaveStatus.approved]),
                LeaveRequest.start_date <= payload.end_date,
                LeaveRequest.end_date >= payload.start_date,
            )
        ).first()
        if overlapping is not None:
            raise ConflictError(
                "An open leave request already covers part of this period",
                details={"leave_id": overlapping.id},
            )

        leave = LeaveRequest(
            staff_id=staff.id,
            leave_type=payload.leave_type,
            session=payload.session,
            start_date=payload.start_date,
            end_date=payload.end_date,
            reason=payload.reason,
            emergency_contact=payload.emergency_contact,
            status=LeaveStatus.pending,
        )
        db.add(leave)
        db.flush()
        log_activity(
            db,
            user=actor,
            action="leave.request",
            entity_type="leave_request",
            entity_id=leave.id,
            details={
                "leave_type": leave.leave_type.value,
                "session": leave.session.value if leave.session else None,
                "start_date": leave.start_date.isoformat(),
                "end_date": leave.end_date.isoformat(),
            },
        )
        drafts = drafts_for_role(
            db,
            UserRole.admin,
            notification_type=NotificationType.leave_requested,
            title="New Leave Request",
            message=f"{staff.name} requested {_describe_leave(leave)}.",
            exclude_user_id=actor.id,
        )

    dispatch_notifications(db, drafts)
    db.refresh(leave)
    return leave


def approve_leave(
    db: Session,
    *,
    actor: User,
    leave_id: str,
    replacement_staff_id: str | None = None,
    comments: str | None = None,
) -> LeaveApprovalResult:
    with transaction(db):
        leave = _load_pending_leave(db, leave_id)
        if replacement_staff_id is not None:
            replacement = db.get(Staff, replacement_staff_id)
            if replacement is None or not replacement.is_active:
                raise ResourceNotFoundError("Staff", replacement_staff_id)
            if replacement.id == leave.staff_id:
                raise ValidationFailedError("The replacement cannot be the staff member on leave")

        _transition(db, leave, to_status=LeaveStatus.approved, actor=actor, comments=comments)
        slots = affected_slots(db, leave.staff_id, leave.leave_type, leave.session)
        sync_attendance_for_leave(db, leave)
        materialized = materialize_assignments(db, leave, slots, replacement_staff_id)

        log_activity(
            db,
            user=actor,
            action="leave.approve",
            entity_type="leave_request",
            entity_id=leave.id,
            details={
                "replacement_staff_id": replacement_staff_id,
                "affected_slots": len(slots),
                "assignments_created": len(materialized.assignments),
                "uncovered_dates": [item.isoformat() for item in materialized.uncovered_dates],
            },
        )

        message = f"Your {_describe_leave(leave)} has been approved."
        if materialized.uncovered_dates:
            message += f" {len(materialized.uncovered_dates)} day(s) still need a replacement."
        drafts: list[NotificationDraft | None] = [
            draft_for_staff(
                db,
                leave.staff_id,
                notification_type=NotificationType.leave_approved,
                title="Leave Request Approved",
                message=message,
            )
        ]
        if replacement_staff_id is not None:
            drafts.append(
                draft_for_staff(
                    db,
                    replacement_staff_id,
                    notification_type=NotificationType.replacement_assigned,
                    title="New Class Assignment",
                    message=_replacement_message(leave, materialized),
                )
            )

    logger.info(
        "Leave %s approved by %s: %d assignment(s), %d uncovered day(s)",
        leave.id,
        actor.id,
        len(materialized.assignments),
        len(materialized.uncovered_dates),
    )
    dispatch_notifications(db, drafts)
    db.refresh(leave)
    return LeaveApprovalResult(
        leave_request=leave,
        uncovered_dates=materialized.uncovered_dates,
        assignments=materialized.assignments,
    )


def reject_leave(
    db: Session,
    *,
    actor: User,
    leave_id: str,
    comments: str | None = None,
) -> LeaveRequest:
    with transaction(db):
        leave = _load_pending_leave(db, leave_id)
        _transition(db, leave, to_status=LeaveStatus.rejected, actor=actor, comments=comments)
        log_activity(
            db,
            user=actor,
            action="leave.reject",
            entity_type="leave_request",
            entity_id=leave.id,
        )
        message = f"Your {_describe_leave(leave)} has been rejected."
        if comments:
            message += f" {comments}"
        draft = draft_for_staff(
            db,
            leave.staff_id,
            notification_type=NotificationType.leave_rejected,
            title="Leave Request Rejected",
            message=message,
        )

    logger.info("Leave %s rejected by %s", leave.id, actor.id)
    dispatch_notifications(db, [draft])
    db.refresh(leave)
    return leave


def list_leave_requests(
    db: Session,
    *,
    staff_id: str | None = None,
    status: LeaveStatus | None = None,
) -> list[LeaveRequest]:
    query = select(LeaveRequest)
    if staff_id is not None:
        query = query.where(LeaveRequest.staff_id == staff_id)
    if status is not None:
        query = query.where(LeaveRequest.status == status)
    return list(db.execute(query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.start_date.desc())).scalars())
