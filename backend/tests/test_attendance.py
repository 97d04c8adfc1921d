from datetime import date, datetime

import pytest

from app.core.exceptions import InvalidStateError, ResourceNotFoundError, ValidationFailedError
from app.models.attendance import AttendanceStatus
from app.models.leave_request import LeaveSession, LeaveStatus, LeaveType
from app.models.user import User
from app.services.attendance import list_attendance, mark_attendance, override_attendance
from app.services.leave_workflow import approve_leave

MONDAY = date(2024, 3, 11)


def _at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(2024, 3, 11, hour, minute, second)


@pytest.fixture()
def lecturer(make_staff):
    return make_staff("Asha Rao")


@pytest.fixture()
def lecturer_user(db, lecturer):
    return db.get(User, lecturer.user_id)


def test_present_before_cutoff_is_recorded_and_locked(db, lecturer, lecturer_user):
    record = mark_attendance(
        db, actor=lecturer_user, staff=lecturer, on_date=MONDAY, status=AttendanceStatus.present, now=_at(9, 45)
    )

    assert record.status == AttendanceStatus.present
    assert record.check_in_time == "09:45:00"
    assert record.is_locked

    with pytest.raises(InvalidStateError):
        mark_attendance(
            db, actor=lecturer_user, staff=lecturer, on_date=MONDAY, status=AttendanceStatus.absent, now=_at(9, 50)
        )


def test_present_after_cutoff_is_refused_but_absent_is_not(db, lecturer, lecturer_user):
    with pytest.raises(ValidationFailedError, match="10:00"):
        mark_attendance(
            db, actor=lecturer_user, staff=lecturer, on_date=MONDAY, status=AttendanceStatus.present, now=_at(10, 1)
        )

    record = mark_attendance(
        db, actor=lecturer_user, staff=lecturer, on_date=MONDAY, status=AttendanceStatus.absent, now=_at(11)
    )
    assert record.status == AttendanceStatus.absent
    assert not record.is_locked


def test_only_today_and_self_markable_statuses(db, lecturer, lecturer_user):
    with pytest.raises(ValidationFailedError):
        mark_attendance(
            db,
            actor=lecturer_user,
            staff=lecturer,
            on_date=date(2024, 3, 12),
            status=AttendanceStatus.present,
            now=_at(9),
        )
    with pytest.raises(ValidationFailedError):
        mark_attendance(
            db, actor=lecturer_user, staff=lecturer, on_date=MONDAY, status=AttendanceStatus.leave, now=_at(9)
        )
    assert list_attendance(db, lecturer.id) == []


def test_approved_leave_overrides_self_marking(db, lecturer, lecturer_user, make_leave):
    make_leave(
        lecturer,
        MONDAY,
        leave_type=LeaveType.half_day,
        session=LeaveSession.afternoon,
        status=LeaveStatus.approved,
    )

    record = mark_attendance(
        db, actor=lecturer_user, staff=lecturer, on_date=MONDAY, status=AttendanceStatus.present, now=_at(9)
    )

    assert record.status == AttendanceStatus.half_day
    assert record.leave_session == LeaveSession.afternoon
    assert record.is_locked


def test_leave_approval_overwrites_earlier_present(db, admin, lecturer, lecturer_user, make_leave):
    mark_attendance(
        db, actor=lecturer_user, staff=lecturer, on_date=MONDAY, status=AttendanceStatus.present, now=_at(9)
    )
    leave = make_leave(lecturer, MONDAY)

    approve_leave(db, actor=admin, leave_id=leave.id)

    records = list_attendance(db, lecturer.id)
    assert len(records) == 1
    assert records[0].status == AttendanceStatus.leave
    assert records[0].is_locked


def test_admin_override_unlocks_and_records_reason(db, admin, lecturer, lecturer_user):
    record = mark_attendance(
        db, actor=lecturer_user, staff=lecturer, on_date=MONDAY, status=AttendanceStatus.present, now=_at(9)
    )

    updated = override_attendance(
        db, actor=admin, attendance_id=record.id, status=AttendanceStatus.absent, reason="Left campus early"
    )

    assert updated.status == AttendanceStatus.absent
    assert updated.override_reason == "Left campus early"
    assert updated.overridden_by_id == admin.id
    assert not updated.is_locked

    with pytest.raises(ResourceNotFoundError):
        override_attendance(db, actor=admin, attendance_id="missing", status=AttendanceStatus.present, reason="n/a")


def test_cutoff_is_exact_to_the_second(db, lecturer, lecturer_user):
    with pytest.raises(ValidationFailedError):
        mark_attendance(
            db,
            actor=lecturer_user,
            staff=lecturer,
            on_date=MONDAY,
            status=AttendanceStatus.present,
            now=_at(10, 0, 45),
        )
    assert list_attendance(db, lecturer.id) == []

    on_the_dot = mark_attendance(
        db, actor=lecturer_user, staff=lecturer, on_date=MONDAY, status=AttendanceStatus.present, now=_at(10)
    )
    assert on_the_dot.status == AttendanceStatus.present
