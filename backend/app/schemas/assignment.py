from datetime import date, datetime

from pydantic import BaseModel, Field

from app.models.leave_request import LeaveSession
from app.models.schedule_assignment import AssignmentStatus


class ScheduleAssignmentOverride(BaseModel):
    replacement_staff_id: str = Field(min_length=1, max_length=36)


class ScheduleAssignmentOut(BaseModel):
    id: str
    timetable_id: str
    leave_request_id: str | None = None
    original_staff_id: str
    replacement_staff_id: str | None = None
    scheduled_date: date
    session: LeaveSession | None = None
    status: AssignmentStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ScheduledClassOut(BaseModel):
    """An assignment joined with its class and the staff names, for dashboards."""

    id: str
    scheduled_date: date
    session: LeaveSession | None = None
    status: AssignmentStatus
    course_name: str
    course_code: str | None = None
    day_of_week: str
    start_time: str
    end_time: str
    classroom: str | None = None
    batch: str | None = None
    original_staff: str | None = None
    replacement_staff: str | None = None
