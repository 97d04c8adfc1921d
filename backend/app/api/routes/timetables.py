from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import find_staff_for_user, get_current_user, get_db, require_roles
from app.db.session import transaction
from app.models.staff import Staff
from app.models.timetable import TimetableSlot
from app.models.user import User, UserRole
from app.schemas.timetable import TimetableSlotCreate, TimetableSlotOut, TimetableSlotUpdate
from app.services.audit import log_activity
from app.services.slots import DAY_ORDER

router = APIRouter()


def _slot_out(slot: TimetableSlot, staff_name: str | None) -> TimetableSlotOut:
    output = TimetableSlotOut.model_validate(slot)
    output.staff_name = staff_name
    return output


def _require_active_staff(db: Session, staff_id: str) -> Staff:
    staff = db.get(Staff, staff_id)
    if staff is None or not staff.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Staff not found")
    return staff


@router.get("/timetables", response_model=list[TimetableSlotOut])
def list_timetables(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TimetableSlotOut]:
    query = (
        select(TimetableSlot, Staff.name)
        .join(Staff, TimetableSlot.staff_id == Staff.id)
        .where(TimetableSlot.is_active.is_(True))
    )
    if current_user.role != UserRole.admin:
        staff = find_staff_for_user(db, current_user)
        if staff is None:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Staff record not found")
        query = query.where(TimetableSlot.staff_id == staff.id)

    rows = db.execute(query).all()
    rows.sort(key=lambda row: (DAY_ORDER.get(row[0].day_of_week, len(DAY_ORDER)), row[0].start_time))
    return [_slot_out(slot, staff_name) for slot, staff_name in rows]


@router.post("/timetables", response_model=TimetableSlotOut, status_code=status.HTTP_201_CREATED)
def create_timetable_slot(
    payload: TimetableSlotCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> TimetableSlotOut:
    staff = _require_active_staff(db, payload.staff_id)
    with transaction(db):
        slot = TimetableSlot(**payload.model_dump(), is_active=True)
        db.add(slot)
        db.flush()
        log_activity(db, user=current_user, action="timetable.create", entity_type="timetable", entity_id=slot.id)
    db.refresh(slot)
    return _slot_out(slot, staff.name)


@router.put("/timetables/{slot_id}", response_model=TimetableSlotOut)
def update_timetable_slot(
    slot_id: str,
    payload: TimetableSlotUpdate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> TimetableSlotOut:
    staff = _require_active_staff(db, payload.staff_id)
    with transaction(db):
        slot = db.get(TimetableSlot, slot_id)
        if slot is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timetable entry not found")
        for key, value in payload.model_dump().items():
            setattr(slot, key, value)
        log_activity(db, user=current_user, action="timetable.update", entity_type="timetable", entity_id=slot.id)
    db.refresh(slot)
    return _slot_out(slot, staff.name)


@router.delete("/timetables/{slot_id}")
def deactivate_timetable_slot(
    slot_id: str,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> dict:
    with transaction(db):
        slot = db.get(TimetableSlot, slot_id)
        if slot is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timetable entry not found")
        slot.is_active = False
        log_activity(db, user=current_user, action="timetable.deactivate", entity_type="timetable", entity_id=slot.id)
    return {"success": True, "message": "Timetable entry deleted"}
