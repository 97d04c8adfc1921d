import datetime as dt
import uuid
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.leave_request import LeaveSession


class AttendanceStatus(str, Enum):
    present = "present"
    absent = "absent"
    leave = "leave"
    half_day = "half-day"


class AttendanceRecord(Base):
    __tablename__ = "attendance"
    __table_args__ = (UniqueConstraint("staff_id", "date", name="uq_attendance_staff_date"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    staff_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[AttendanceStatus] = mapped_column(
        SAEnum(
            AttendanceStatus,
            name="attendance_status",
            values_callable=lambda members: [item.value for item in members],
        ),
        nullable=False,
    )
    check_in_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    leave_session: Mapped[LeaveSession | None] = mapped_column(
        SAEnum(LeaveSession, name="leave_session"),
        nullable=True,
    )
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    override_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    overridden_by_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
