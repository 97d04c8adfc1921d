from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.common import TIME_PATTERN, normalize_day, normalize_optional_text, parse_time_to_minutes


class TimetableSlotBase(BaseModel):
    staff_id: str = Field(min_length=1, max_length=36)
    course_name: str = Field(min_length=1, max_length=200)
    course_code: str | None = Field(default=None, max_length=50)
    day_of_week: str
    start_time: str
    end_time: str
    classroom: str | None = Field(default=None, max_length=100)
    batch: str | None = Field(default=None, max_length=100)
    semester: str | None = Field(default=None, max_length=50)

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return normalize_day(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        value = value.strip()
        # Accept "HH:MM:SS" as stored by older clients.
        if len(value) == 8 and value.count(":") == 2:
            value = value[:5]
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @field_validator("course_code", "classroom", "batch", "semester")
    @classmethod
    def normalize_text(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "TimetableSlotBase":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("End time must be after start time")
        return self


class TimetableSlotCreate(TimetableSlotBase):
    pass


class TimetableSlotUpdate(TimetableSlotBase):
    pass


class TimetableSlotOut(BaseModel):
    id: str
    staff_id: str
    staff_name: str | None = None
    course_name: str
    course_code: str | None = None
    day_of_week: str
    start_time: str
    end_time: str
    classroom: str | None = None
    batch: str | None = None
    semester: str | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
