from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_roles
from app.core.security import get_password_hash
from app.db.session import transaction
from app.models.access_log import AccessLog
from app.models.staff import Staff
from app.models.user import User, UserRole
from app.schemas.staff import StaffCreate, StaffOut, StaffStats, StaffUpdate
from app.services.audit import log_activity

router = APIRouter()


def _get_staff_or_404(db: Session, staff_id: str) -> Staff:
    staff = db.get(Staff, staff_id)
    if staff is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Staff not found")
    return staff


@router.get("/staff", response_model=list[StaffOut])
def list_staff(
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> list[StaffOut]:
    query = select(Staff).where(Staff.is_active.is_(True)).order_by(Staff.name)
    return list(db.execute(query).scalars())


@router.get("/staff/{staff_id}", response_model=StaffOut)
def get_staff(
    staff_id: str,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> StaffOut:
    return _get_staff_or_404(db, staff_id)


@router.post("/staff", response_model=StaffOut, status_code=status.HTTP_201_CREATED)
def create_staff(
    payload: StaffCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> StaffOut:
    existing = db.execute(select(User.id).where(User.email == payload.email)).first()
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    with transaction(db):
        user = User(
            name=payload.name,
            email=payload.email,
            hashed_password=get_password_hash(payload.password),
            role=UserRole.staff,
            is_active=True,
        )
        db.add(user)
        db.flush()
        staff = Staff(
            user_id=user.id,
            name=payload.name,
            email=payload.email,
            department=payload.department,
            phone=payload.phone,
            qualification=payload.qualification,
            hire_date=payload.hire_date,
            is_active=True,
        )
        db.add(staff)
        db.flush()
        log_activity(db, user=current_user, action="staff.create", entity_type="staff", entity_id=staff.id)
    db.refresh(staff)
    return staff


@router.put("/staff/{staff_id}", response_model=StaffOut)
def update_staff(
    staff_id: str,
    payload: StaffUpdate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> StaffOut:
    with transaction(db):
        staff = _get_staff_or_404(db, staff_id)
        changes = payload.model_dump(exclude_unset=True)
        for key, value in changes.items():
            setattr(staff, key, value.strip() if isinstance(value, str) else value)
        log_activity(
            db,
            user=current_user,
            action="staff.update",
            entity_type="staff",
            entity_id=staff.id,
            details={"fields": sorted(changes)},
        )
    db.refresh(staff)
    return staff


@router.delete("/staff/{staff_id}")
def deactivate_staff(
    staff_id: str,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> dict:
    with transaction(db):
        staff = _get_staff_or_404(db, staff_id)
        staff.is_active = False
        if staff.user_id is not None:
            user = db.get(User, staff.user_id)
            if user is not None:
                user.is_active = False
        log_activity(db, user=current_user, action="staff.deactivate", entity_type="staff", entity_id=staff.id)
    return {"success": True, "message": "Staff deactivated"}


@router.get("/stats/staff", response_model=StaffStats)
def staff_stats(
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> StaffStats:
    staff_count = db.execute(select(func.count(Staff.id)).where(Staff.is_active.is_(True))).scalar_one()
    logged_in = db.execute(
        select(func.count(func.distinct(AccessLog.user_id)))
        .join(User, AccessLog.user_id == User.id)
        .where(
            User.role == UserRole.staff,
            AccessLog.is_successful.is_(True),
            AccessLog.logout_time.is_(None),
        )
    ).scalar_one()
    return StaffStats(staff_count=staff_count, logged_in_staff=logged_in)
