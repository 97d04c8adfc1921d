from datetime import date

import pytest

from app.core.exceptions import ResourceNotFoundError
from app.models.leave_request import LeaveSession, LeaveStatus, LeaveType
from app.models.schedule_assignment import AssignmentStatus, ScheduleAssignment
from app.services.availability import is_available, list_available_replacements, required_coverage

MONDAY = date(2024, 3, 11)


def _book(db, slot, original, replacement, on_date, session):
    assignment = ScheduleAssignment(
        timetable_id=slot.id,
        original_staff_id=original.id,
        replacement_staff_id=replacement.id,
        scheduled_date=on_date,
        session=session,
        status=AssignmentStatus.pending,
    )
    db.add(assignment)
    db.commit()
    return assignment


def test_staff_on_approved_leave_is_unavailable(db, make_staff, make_leave):
    staff = make_staff("Asha Rao")
    make_leave(staff, date(2024, 3, 10), date(2024, 3, 12), status=LeaveStatus.approved)

    assert not is_available(db, staff.id, MONDAY)
    assert not is_available(db, staff.id, MONDAY, LeaveSession.afternoon)
    assert is_available(db, staff.id, date(2024, 3, 13))


def test_pending_or_rejected_leave_does_not_block(db, make_staff, make_leave):
    staff = make_staff("Asha Rao")
    make_leave(staff, MONDAY, status=LeaveStatus.pending)
    make_leave(staff, MONDAY, status=LeaveStatus.rejected)

    assert is_available(db, staff.id, MONDAY)


def test_existing_booking_blocks_same_session_only(db, make_staff, make_slot):
    original = make_staff("Asha Rao")
    replacement = make_staff("Vikram Shah")
    slot = make_slot(original, "Monday", "09:00", "10:00")
    _book(db, slot, original, replacement, MONDAY, LeaveSession.morning)

    assert not is_available(db, replacement.id, MONDAY)
    assert not is_available(db, replacement.id, MONDAY, LeaveSession.morning)
    assert is_available(db, replacement.id, MONDAY, LeaveSession.afternoon)
    assert is_available(db, replacement.id, date(2024, 3, 12), LeaveSession.morning)


def test_whole_day_booking_blocks_every_session(db, make_staff, make_slot):
    original = make_staff("Asha Rao")
    replacement = make_staff("Vikram Shah")
    slot = make_slot(original, "Monday", "09:00", "10:00")
    _book(db, slot, original, replacement, MONDAY, None)

    assert not is_available(db, replacement.id, MONDAY, LeaveSession.afternoon)


def test_ignore_assignment_excludes_the_booking_being_replaced(db, make_staff, make_slot):
    original = make_staff("Asha Rao")
    replacement = make_staff("Vikram Shah")
    slot = make_slot(original, "Monday", "09:00", "10:00")
    booking = _book(db, slot, original, replacement, MONDAY, LeaveSession.morning)

    assert is_available(db, replacement.id, MONDAY, LeaveSession.morning, ignore_assignment_id=booking.id)


def test_replacement_listing_excludes_requester_busy_and_absent_staff(db, make_staff, make_slot, make_leave):
    requester = make_staff("Asha Rao")
    busy = make_staff("Busy Bala")
    absent = make_staff("Absent Anil")
    free = make_staff("Free Farah")
    inactive = make_staff("Gone Gita")
    inactive.is_active = False
    db.commit()

    other = make_staff("Other Omar")
    other_slot = make_slot(other, "Monday", "10:00", "11:00")
    _book(db, other_slot, other, busy, MONDAY, LeaveSession.morning)
    make_leave(absent, MONDAY, status=LeaveStatus.approved)

    make_slot(requester, "Monday", "09:00", "10:00")
    leave = make_leave(requester, MONDAY, leave_type=LeaveType.half_day, session=LeaveSession.morning)

    names = [staff.name for staff in list_available_replacements(db, leave.id)]

    assert names == ["Free Farah", "Other Omar"]


def test_afternoon_booking_does_not_exclude_from_morning_cover(db, make_staff, make_slot, make_leave):
    requester = make_staff("Asha Rao")
    helper = make_staff("Vikram Shah")
    other = make_staff("Other Omar")
    other_slot = make_slot(other, "Monday", "15:00", "16:00")
    _book(db, other_slot, other, helper, MONDAY, LeaveSession.afternoon)

    make_slot(requester, "Monday", "09:00", "10:00")
    leave = make_leave(requester, MONDAY, leave_type=LeaveType.half_day, session=LeaveSession.morning)

    ids = {staff.id for staff in list_available_replacements(db, leave.id)}

    assert helper.id in ids
    assert requester.id not in ids


def test_replacement_listing_for_unknown_leave(db):
    with pytest.raises(ResourceNotFoundError):
        list_available_replacements(db, "missing")


def test_multi_day_leave_needs_cover_on_every_day(db, make_staff, make_slot, make_leave):
    requester = make_staff("Asha Rao")
    helper = make_staff("Vikram Shah")
    other = make_staff("Other Omar")
    make_slot(requester, "Monday", "09:00", "10:00")
    other_slot = make_slot(other, "Tuesday", "09:00", "10:00")
    tuesday = date(2024, 3, 12)
    _book(db, other_slot, other, helper, tuesday, LeaveSession.morning)
    leave = make_leave(requester, MONDAY, tuesday)

    assert required_coverage(db, leave) == [(MONDAY, LeaveSession.morning), (tuesday, LeaveSession.morning)]
    names = [staff.name for staff in list_available_replacements(db, leave.id)]
    assert names == ["Other Omar"]
