from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import find_staff_for_user, get_current_user, get_db, require_roles
from app.models.user import User, UserRole
from app.schemas.assignment import ScheduleAssignmentOut, ScheduleAssignmentOverride, ScheduledClassOut
from app.services.assignments import list_assignments, list_scheduled_classes, override_assignment

router = APIRouter()


@router.get("/schedule-assignments", response_model=list[ScheduleAssignmentOut])
def list_schedule_assignments(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> list[ScheduleAssignmentOut]:
    return list_assignments(db, start, end)


@router.post("/schedule-assignments/{assignment_id}/override", response_model=ScheduleAssignmentOut)
def override_schedule_assignment(
    assignment_id: str,
    payload: ScheduleAssignmentOverride,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> ScheduleAssignmentOut:
    return override_assignment(
        db,
        actor=current_user,
        assignment_id=assignment_id,
        replacement_staff_id=payload.replacement_staff_id,
    )


@router.get("/scheduled-classes", response_model=list[ScheduledClassOut])
def scheduled_classes(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ScheduledClassOut]:
    if current_user.role == UserRole.admin:
        return list_scheduled_classes(db)
    staff = find_staff_for_user(db, current_user)
    if staff is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Staff record not found")
    return list_scheduled_classes(db, staff.id)
