from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.models.attendance import AttendanceStatus
from app.models.leave_request import LeaveSession


class AttendanceMark(BaseModel):
    date: date
    status: Literal["present", "absent"]


class AttendanceOverride(BaseModel):
    status: AttendanceStatus
    reason: str = Field(min_length=3, max_length=1000)

    @field_validator("reason")
    @classmethod
    def normalize_reason(cls, value: str) -> str:
        trimmed = value.strip()
        if len(trimmed) < 3:
            raise ValueError("An override reason is required")
        return trimmed


class AttendanceOut(BaseModel):
    id: str
    staff_id: str
    date: date
    status: AttendanceStatus
    check_in_time: str | None = None
    leave_session: LeaveSession | None = None
    is_locked: bool
    override_reason: str | None = None
    overridden_by_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
