from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationFailedError
from app.models.leave_request import LeaveRequest, LeaveSession, LeaveType
from app.models.timetable import TimetableSlot
from app.schemas.common import DAY_VALUES
from app.services.calendar import iter_dates, session_for_start_time

DAY_ORDER = {day: index for index, day in enumerate(DAY_VALUES)}


def affected_slots(
    db: Session,
    staff_id: str,
    leave_type: LeaveType,
    session: LeaveSession | None = None,
) -> list[TimetableSlot]:
    """Active weekly slots of ``staff_id`` that a leave of this shape takes out.

    A half-day leave only affects the classes starting in its session; a
    full-day leave affects all of them.
    """
    slots = list(
        db.execute(
            select(TimetableSlot).where(
                TimetableSlot.staff_id == staff_id,
                TimetableSlot.is_active.is_(True),
            )
        ).scalars()
    )
    if leave_type == LeaveType.half_day:
        if session is None:
            raise ValidationFailedError("Half day leave requires a session")
        slots = [slot for slot in slots if session_for_start_time(slot.start_time) == session]
    slots.sort(key=lambda slot: (DAY_ORDER.get(slot.day_of_week, len(DAY_ORDER)), slot.start_time, slot.id))
    return slots


def leave_dates(leave: LeaveRequest) -> list[date]:
    """Calendar dates whose classes a leave takes out.

    Every day of ``[start_date, end_date]`` counts; for a half-day leave the
    slots are already narrowed to its session.
    """
    return list(iter_dates(leave.start_date, leave.end_date))
