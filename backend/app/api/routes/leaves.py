from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import find_staff_for_user, get_current_staff, get_current_user, get_db, require_roles
from app.models.leave_request import LeaveStatus
from app.models.staff import Staff
from app.models.user import User, UserRole
from app.schemas.assignment import ScheduleAssignmentOut
from app.schemas.leave import (
    LeaveApprovalOut,
    LeaveApprove,
    LeaveReject,
    LeaveRequestCreate,
    LeaveRequestOut,
)
from app.schemas.staff import StaffOut
from app.services.availability import list_available_replacements
from app.services.leave_workflow import approve_leave, list_leave_requests, reject_leave, request_leave

router = APIRouter()


@router.get("/leaves", response_model=list[LeaveRequestOut])
def list_leaves(
    leave_status: LeaveStatus | None = Query(default=None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[LeaveRequestOut]:
    staff_id = None
    if current_user.role != UserRole.admin:
        staff = find_staff_for_user(db, current_user)
        if staff is None:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Staff record not found")
        staff_id = staff.id
    return list_leave_requests(db, staff_id=staff_id, status=leave_status)


@router.post("/leaves", response_model=LeaveRequestOut, status_code=status.HTTP_201_CREATED)
def create_leave(
    payload: LeaveRequestCreate,
    current_user: User = Depends(get_current_user),
    staff: Staff = Depends(get_current_staff),
    db: Session = Depends(get_db),
) -> LeaveRequestOut:
    return request_leave(db, actor=current_user, staff=staff, payload=payload)


@router.post("/leaves/{leave_id}/approve", response_model=LeaveApprovalOut)
def approve(
    leave_id: str,
    payload: LeaveApprove,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> LeaveApprovalOut:
    result = approve_leave(
        db,
        actor=current_user,
        leave_id=leave_id,
        replacement_staff_id=payload.replacement_staff_id,
        comments=payload.admin_comments,
    )
    return LeaveApprovalOut(
        leave_request=LeaveRequestOut.model_validate(result.leave_request),
        uncovered_dates=result.uncovered_dates,
        assignments=[ScheduleAssignmentOut.model_validate(item) for item in result.assignments],
    )


@router.post("/leaves/{leave_id}/reject", response_model=LeaveRequestOut)
def reject(
    leave_id: str,
    payload: LeaveReject,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> LeaveRequestOut:
    return reject_leave(db, actor=current_user, leave_id=leave_id, comments=payload.admin_comments)


@router.get("/leaves/{leave_id}/replacements", response_model=list[StaffOut])
def available_replacements(
    leave_id: str,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> list[StaffOut]:
    return list_available_replacements(db, leave_id)
