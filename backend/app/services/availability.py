from __future__ import annotations

from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError
from app.models.leave_request import LeaveRequest, LeaveSession, LeaveStatus
from app.models.schedule_assignment import ScheduleAssignment
from app.models.staff import Staff
from app.services.calendar import session_for_start_time
from app.services.slots import affected_slots, leave_dates


def is_on_approved_leave(db: Session, staff_id: str, on_date: date) -> bool:
    query = select(LeaveRequest.id).where(
        LeaveRequest.staff_id == staff_id,
        LeaveRequest.status == LeaveStatus.approved,
        LeaveRequest.start_date <= on_date,
        LeaveRequest.end_date >= on_date,
    )
    return db.execute(query.limit(1)).first() is not None


def is_available(
    db: Session,
    staff_id: str,
    on_date: date,
    session: LeaveSession | None = None,
    *,
    ignore_leave_id: str | None = None,
    ignore_assignment_id: str | None = None,
) -> bool:
    """Whether ``staff_id`` can cover a class on ``on_date`` (optionally one session).

    A staff member is unavailable while on approved leave, or when already
    booked as a replacement that day. With a session, only bookings for the same
    session (or whole-day bookings without one) count. Reads only.
    """
    if is_on_approved_leave(db, staff_id, on_date):
        return False

    query = select(ScheduleAssignment.id).where(
        ScheduleAssignment.replacement_staff_id == staff_id,
        ScheduleAssignment.scheduled_date == on_date,
    )
    if session is not None:
        query = query.where(
            or_(ScheduleAssignment.session == session, ScheduleAssignment.session.is_(None))
        )
    if ignore_leave_id is not None:
        query = query.where(
            or_(
                ScheduleAssignment.leave_request_id.is_(None),
                ScheduleAssignment.leave_request_id != ignore_leave_id,
            )
        )
    if ignore_assignment_id is not None:
        query = query.where(ScheduleAssignment.id != ignore_assignment_id)
    return db.execute(query.limit(1)).first() is None


def required_coverage(db: Session, leave: LeaveRequest) -> list[tuple[date, LeaveSession | None]]:
    """The (date, session) pairs a replacement must be free for to cover ``leave``."""
    dates = leave_dates(leave)
    sessions = {
        session_for_start_time(slot.start_time)
        for slot in affected_slots(db, leave.staff_id, leave.leave_type, leave.session)
    }
    if not sessions:
        # No classes to hand over: the replacement still has to be free on the leave days.
        sessions = {leave.session}
    needed = {(current, session) for current in dates for session in sessions}
    return sorted(needed, key=lambda item: (item[0], item[1].value if item[1] else ""))


def list_available_replacements(db: Session, leave_id: str) -> list[Staff]:
    leave = db.get(LeaveRequest, leave_id)
    if leave is None:
        raise ResourceNotFoundError("LeaveRequest", leave_id)

    needed = required_coverage(db, leave)
    candidates = db.execute(
        select(Staff)
        .where(Staff.is_active.is_(True), Staff.id != leave.staff_id)
        .order_by(Staff.name, Staff.id)
    ).scalars()
    return [
        candidate
        for candidate in candidates
        if all(
            is_available(db, candidate.id, on_date, session, ignore_leave_id=leave.id)
            for on_date, session in needed
        )
    ]
