from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import find_staff_for_user, get_current_staff, get_current_user, get_db, require_roles
from app.models.attendance import AttendanceStatus
from app.models.staff import Staff
from app.models.user import User, UserRole
from app.schemas.attendance import AttendanceMark, AttendanceOut, AttendanceOverride
from app.services.attendance import list_attendance, mark_attendance, override_attendance

router = APIRouter()


def get_clock() -> datetime:
    return datetime.now()


@router.post("/attendance", response_model=AttendanceOut, status_code=status.HTTP_201_CREATED)
def mark(
    payload: AttendanceMark,
    current_user: User = Depends(get_current_user),
    staff: Staff = Depends(get_current_staff),
    now: datetime = Depends(get_clock),
    db: Session = Depends(get_db),
) -> AttendanceOut:
    return mark_attendance(
        db,
        actor=current_user,
        staff=staff,
        on_date=payload.date,
        status=AttendanceStatus(payload.status),
        now=now,
    )


@router.get("/attendance", response_model=list[AttendanceOut])
def list_records(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[AttendanceOut]:
    if current_user.role == UserRole.admin:
        return list_attendance(db)
    staff = find_staff_for_user(db, current_user)
    if staff is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Staff record not found")
    return list_attendance(db, staff.id)


@router.post("/attendance/{attendance_id}/override", response_model=AttendanceOut)
def override(
    attendance_id: str,
    payload: AttendanceOverride,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> AttendanceOut:
    return override_attendance(
        db,
        actor=current_user,
        attendance_id=attendance_id,
        status=payload.status,
        reason=payload.reason,
    )
