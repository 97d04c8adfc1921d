from __future__ import annotations

from datetime import date, datetime, time
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import InvalidStateError, ResourceNotFoundError, ValidationFailedError
from app.db.session import transaction
from app.models.attendance import AttendanceRecord, AttendanceStatus
from app.models.leave_request import LeaveRequest, LeaveSession, LeaveStatus, LeaveType
from app.models.staff import Staff
from app.models.user import User
from app.services.audit import log_activity
from app.services.calendar import iter_dates

logger = logging.getLogger(__name__)

SELF_MARKABLE_STATUSES = {AttendanceStatus.present, AttendanceStatus.absent}


def leave_attendance_status(leave_type: LeaveType) -> AttendanceStatus:
    if leave_type == LeaveType.half_day:
        return AttendanceStatus.half_day
    return AttendanceStatus.leave


def _get_record(db: Session, staff_id: str, on_date: date) -> AttendanceRecord | None:
    return db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.staff_id == staff_id,
            AttendanceRecord.date == on_date,
        )
    ).scalar_one_or_none()


def _upsert_record(
    db: Session,
    *,
    staff_id: str,
    on_date: date,
    status: AttendanceStatus,
    is_locked: bool,
    leave_session: LeaveSession | None = None,
    check_in_time: str | None = None,
) -> AttendanceRecord:
    record = _get_record(db, staff_id, on_date)
    if record is None:
        record = AttendanceRecord(staff_id=staff_id, date=on_date)
        db.add(record)
    record.status = status
    record.is_locked = is_locked
    record.leave_session = leave_session
    if check_in_time is not None:
        record.check_in_time = check_in_time
    db.flush()
    return record


def sync_attendance_for_leave(db: Session, leave: LeaveRequest) -> list[AttendanceRecord]:
    """Write a locked leave record for every day of ``leave``.

    Runs inside the approval transaction. The leave always wins, including over
    a "present" the staff member marked before the approval came through.
    """
    status = leave_attendance_status(leave.leave_type)
    return [
        _upsert_record(
            db,
            staff_id=leave.staff_id,
            on_date=current,
            status=status,
            is_locked=True,
            leave_session=leave.session,
        )
        for current in iter_dates(leave.start_date, leave.end_date)
    ]


def _approved_leave_on(db: Session, staff_id: str, on_date: date) -> LeaveRequest | None:
    return db.execute(
        select(LeaveRequest)
        .where(
            LeaveRequest.staff_id == staff_id,
            LeaveRequest.status == LeaveStatus.approved,
            LeaveRequest.start_date <= on_date,
            LeaveRequest.end_date >= on_date,
        )
        .limit(1)
    ).scalar_one_or_none()


def mark_attendance(
    db: Session,
    *,
    actor: User,
    staff: Staff,
    on_date: date,
    status: AttendanceStatus,
    now: datetime | None = None,
) -> AttendanceRecord:
    """Self-service attendance for today, before the cutoff when marking present."""
    now = now or datetime.now()
    if status not in SELF_MARKABLE_STATUSES:
        raise ValidationFailedError("Only present or absent can be marked by staff")
    if on_date != now.date():
        raise ValidationFailedError("You can only mark attendance for today")

    cutoff = get_settings().attendance_cutoff_time
    if status == AttendanceStatus.present and now.time() > time.fromisoformat(cutoff):
        raise ValidationFailedError(
            f"Attendance marking closed. Cut-off time is {cutoff}",
            details={"cutoff": cutoff},
        )

    check_in_time = now.strftime("%H:%M:%S")
    with transaction(db):
        existing = _get_record(db, staff.id, on_date)
        if existing is not None and existing.is_locked:
            raise InvalidStateError(
                "Attendance for this date is locked and can only be changed by an administrator",
                details={"attendance_id": existing.id, "status": existing.status.value},
            )

        leave = _approved_leave_on(db, staff.id, on_date)
        if leave is not None:
            record = _upsert_record(
                db,
                staff_id=staff.id,
                on_date=on_date,
                status=leave_attendance_status(leave.leave_type),
                is_locked=True,
                leave_session=leave.session,
                check_in_time=check_in_time,
            )
            logger.info("Attendance for staff %s on %s set from approved leave %s", staff.id, on_date, leave.id)
        else:
            record = _upsert_record(
                db,
                staff_id=staff.id,
                on_date=on_date,
                status=status,
                is_locked=status == AttendanceStatus.present,
                check_in_time=check_in_time,
            )

        log_activity(
            db,
            user=actor,
            action="attendance.mark",
            entity_type="attendance",
            entity_id=record.id,
            details={"date": on_date.isoformat(), "status": record.status.value},
        )
    db.refresh(record)
    return record


def override_attendance(
    db: Session,
    *,
    actor: User,
    attendance_id: str,
    status: AttendanceStatus,
    reason: str,
) -> AttendanceRecord:
    with transaction(db):
        record = db.get(AttendanceRecord, attendance_id)
        if record is None:
            raise ResourceNotFoundError("AttendanceRecord", attendance_id)
        previous = record.status
        record.status = status
        record.override_reason = reason
        record.overridden_by_id = actor.id
        record.is_locked = False
        if status not in {AttendanceStatus.leave, AttendanceStatus.half_day}:
            record.leave_session = None
        log_activity(
            db,
            user=actor,
            action="attendance.override",
            entity_type="attendance",
            entity_id=record.id,
            details={"from": previous.value, "to": status.value, "reason": reason},
        )
    logger.info("Attendance %s overridden by %s: %s -> %s", attendance_id, actor.id, previous.value, status.value)
    db.refresh(record)
    return record


def list_attendance(db: Session, staff_id: str | None = None) -> list[AttendanceRecord]:
    query = select(AttendanceRecord)
    if staff_id is not None:
        query = query.where(AttendanceRecord.staff_id == staff_id)
    return list(db.execute(query.order_by(AttendanceRecord.date.desc())).scalars())
