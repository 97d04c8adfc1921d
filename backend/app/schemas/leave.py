from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.leave_request import LeaveSession, LeaveStatus, LeaveType
from app.schemas.assignment import ScheduleAssignmentOut
from app.schemas.common import normalize_optional_text

SESSION_ALIASES = {
    "fn": LeaveSession.morning,
    "forenoon": LeaveSession.morning,
    "an": LeaveSession.afternoon,
    "afternoon": LeaveSession.afternoon,
    "morning": LeaveSession.morning,
}


class LeaveRequestCreate(BaseModel):
    leave_type: LeaveType
    session: LeaveSession | None = None
    start_date: date
    end_date: date
    reason: str | None = Field(default=None, max_length=1000)
    emergency_contact: str | None = Field(default=None, max_length=100)

    @field_validator("session", mode="before")
    @classmethod
    def normalize_session(cls, value):
        if value is None or isinstance(value, LeaveSession):
            return value
        key = str(value).strip().lower()
        if not key:
            return None
        if key not in SESSION_ALIASES:
            raise ValueError("Session must be morning/afternoon (or FN/AN)")
        return SESSION_ALIASES[key]

    @field_validator("reason", "emergency_contact")
    @classmethod
    def normalize_text(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)

    @model_validator(mode="after")
    def validate_leave_shape(self) -> "LeaveRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        if self.leave_type == LeaveType.half_day and self.session is None:
            raise ValueError("session is required for half day leave")
        if self.leave_type == LeaveType.full_day:
            self.session = None
        return self


class LeaveApprove(BaseModel):
    replacement_staff_id: str | None = Field(default=None, max_length=36)
    admin_comments: str | None = Field(default=None, max_length=1000)

    @field_validator("replacement_staff_id", "admin_comments")
    @classmethod
    def normalize_text(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)


class LeaveReject(BaseModel):
    admin_comments: str | None = Field(default=None, max_length=1000)

    @field_validator("admin_comments")
    @classmethod
    def normalize_text(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)


class LeaveRequestOut(BaseModel):
    id: str
    staff_id: str
    leave_type: LeaveType
    session: LeaveSession | None = None
    start_date: date
    end_date: date
    reason: str | None = None
    emergency_contact: str | None = None
    status: LeaveStatus
    approved_by_id: str | None = None
    admin_comments: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class LeaveApprovalOut(BaseModel):
    leave_request: LeaveRequestOut
    uncovered_dates: list[date]
    assignments: list[ScheduleAssignmentOut]
