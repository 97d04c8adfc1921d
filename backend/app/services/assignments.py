from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, aliased

from app.core.exceptions import ConflictError, ResourceNotFoundError, ValidationFailedError
from app.db.session import transaction
from app.models.leave_request import LeaveRequest, LeaveSession
from app.models.notification import NotificationType
from app.models.schedule_assignment import AssignmentStatus, ScheduleAssignment
from app.models.staff import Staff
from app.models.timetable import TimetableSlot
from app.models.user import User
from app.schemas.assignment import ScheduledClassOut
from app.services.audit import log_activity
from app.services.availability import is_available
from app.services.calendar import session_for_start_time
from app.services.notifications import dispatch_notifications, draft_for_staff
from app.services.slots import leave_dates

logger = logging.getLogger(__name__)

DEFAULT_LISTING_DAYS = 7


@dataclass
class MaterializeResult:
    assignments: list[ScheduleAssignment] = field(default_factory=list)
    uncovered_dates: list[date] = field(default_factory=list)


def materialize_assignments(
    db: Session,
    leave: LeaveRequest,
    slots: list[TimetableSlot],
    replacement_staff_id: str | None,
) -> MaterializeResult:
    """Create one pending assignment per class occurrence the replacement can take.

    Availability is decided once per (date, session) against the state before
    this call, so a replacement covering one morning class of the leave covers
    all of them. Occurrences the replacement cannot take are left out and their
    dates reported back.
    """
    result = MaterializeResult()
    if replacement_staff_id is None:
        return result

    decisions: dict[tuple[date, LeaveSession], bool] = {}
    uncovered: set[date] = set()
    occurrences: list[tuple[TimetableSlot, date, LeaveSession]] = []
    dates = leave_dates(leave)
    for slot in slots:
        slot_session = session_for_start_time(slot.start_time)
        for scheduled_date in dates:
            key = (scheduled_date, slot_session)
            if key not in decisions:
                decisions[key] = is_available(db, replacement_staff_id, scheduled_date, slot_session)
            occurrences.append((slot, scheduled_date, slot_session))
    occurrences.sort(key=lambda item: (item[1], item[0].start_time, item[0].id))

    for slot, scheduled_date, slot_session in occurrences:
        if not decisions[(scheduled_date, slot_session)]:
            uncovered.add(scheduled_date)
            continue
        assignment = ScheduleAssignment(
            timetable_id=slot.id,
            leave_request_id=leave.id,
            original_staff_id=leave.staff_id,
            replacement_staff_id=replacement_staff_id,
            scheduled_date=scheduled_date,
            session=slot_session,
            status=AssignmentStatus.pending,
        )
        db.add(assignment)
        result.assignments.append(assignment)

    db.flush()
    result.uncovered_dates = sorted(uncovered)
    if result.uncovered_dates:
        logger.warning(
            "Replacement %s unavailable for leave %s on %s",
            replacement_staff_id,
            leave.id,
            ", ".join(item.isoformat() for item in result.uncovered_dates),
        )
    return result


def override_assignment(
    db: Session,
    *,
    actor: User,
    assignment_id: str,
    replacement_staff_id: str,
) -> ScheduleAssignment:
    with transaction(db):
        assignment = db.get(ScheduleAssignment, assignment_id)
        if assignment is None:
            raise ResourceNotFoundError("ScheduleAssignment", assignment_id)
        replacement = db.get(Staff, replacement_staff_id)
        if replacement is None or not replacement.is_active:
            raise ResourceNotFoundError("Staff", replacement_staff_id)
        if replacement.id == assignment.original_staff_id:
            raise ValidationFailedError("The replacement cannot be the staff member on leave")
        if not is_available(
            db,
            replacement.id,
            assignment.scheduled_date,
            assignment.session,
            ignore_assignment_id=assignment.id,
        ):
            raise ConflictError(
                "Replacement staff is not available for this class",
                details={
                    "replacement_staff_id": replacement.id,
                    "scheduled_date": assignment.scheduled_date.isoformat(),
                    "session": assignment.session.value if assignment.session else None,
                },
            )

        previous_replacement_id = assignment.replacement_staff_id
        assignment.replacement_staff_id = replacement.id
        assignment.status = AssignmentStatus.overridden
        log_activity(
            db,
            user=actor,
            action="assignment.override",
            entity_type="schedule_assignment",
            entity_id=assignment.id,
            details={
                "previous_replacement_staff_id": previous_replacement_id,
                "replacement_staff_id": replacement.id,
            },
        )
        draft = draft_for_staff(
            db,
            replacement.id,
            notification_type=NotificationType.assignment_overridden,
            title="New Class Assignment",
            message=f"You have been assigned to cover a class on {assignment.scheduled_date.isoformat()}.",
        )

    logger.info("Assignment %s overridden to replacement %s by %s", assignment_id, replacement_staff_id, actor.id)
    dispatch_notifications(db, [draft])
    db.refresh(assignment)
    return assignment


def list_assignments(db: Session, start: date | None = None, end: date | None = None) -> list[ScheduleAssignment]:
    end = end or date.today()
    start = start or end - timedelta(days=DEFAULT_LISTING_DAYS)
    if end < start:
        raise ValidationFailedError("end cannot be before start")
    return list(
        db.execute(
            select(ScheduleAssignment)
            .where(ScheduleAssignment.scheduled_date.between(start, end))
            .order_by(ScheduleAssignment.scheduled_date.desc(), ScheduleAssignment.created_at)
        ).scalars()
    )


def list_scheduled_classes(db: Session, replacement_staff_id: str | None = None) -> list[ScheduledClassOut]:
    original = aliased(Staff)
    replacement = aliased(Staff)
    query = (
        select(ScheduleAssignment, TimetableSlot, original.name, replacement.name)
        .join(TimetableSlot, ScheduleAssignment.timetable_id == TimetableSlot.id)
        .join(original, ScheduleAssignment.original_staff_id == original.id)
        .outerjoin(replacement, ScheduleAssignment.replacement_staff_id == replacement.id)
    )
    if replacement_staff_id is not None:
        query = query.where(ScheduleAssignment.replacement_staff_id == replacement_staff_id)
    query = query.order_by(ScheduleAssignment.scheduled_date.desc(), TimetableSlot.start_time)

    return [
        ScheduledClassOut(
            id=assignment.id,
            scheduled_date=assignment.scheduled_date,
            session=assignment.session,
            status=assignment.status,
            course_name=slot.course_name,
            course_code=slot.course_code,
            day_of_week=slot.day_of_week,
            start_time=slot.start_time,
            end_time=slot.end_time,
            classroom=slot.classroom,
            batch=slot.batch,
            original_staff=original_name,
            replacement_staff=replacement_name,
        )
        for assignment, slot, original_name, replacement_name in db.execute(query).all()
    ]
