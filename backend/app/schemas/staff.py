from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.common import normalize_optional_text


class StaffBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    department: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=50)
    qualification: str | None = Field(default=None, max_length=200)
    hire_date: date | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Name cannot be empty")
        return trimmed

    @field_validator("department", "phone", "qualification")
    @classmethod
    def normalize_text(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)


class StaffCreate(StaffBase):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class StaffUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    department: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=50)
    qualification: str | None = Field(default=None, max_length=200)
    hire_date: date | None = None


class StaffOut(StaffBase):
    id: str
    user_id: str | None = None
    email: str
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class StaffStats(BaseModel):
    staff_count: int
    logged_in_staff: int
