import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SAEnum, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.leave_request import LeaveSession


class AssignmentStatus(str, Enum):
    pending = "pending"
    overridden = "overridden"


class ScheduleAssignment(Base):
    __tablename__ = "schedule_assignments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    timetable_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    leave_request_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    original_staff_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    replacement_staff_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    session: Mapped[LeaveSession | None] = mapped_column(
        SAEnum(LeaveSession, name="leave_session"),
        nullable=True,
    )
    status: Mapped[AssignmentStatus] = mapped_column(
        SAEnum(AssignmentStatus, name="assignment_status"),
        nullable=False,
        default=AssignmentStatus.pending,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
