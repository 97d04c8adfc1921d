"""create schedule assignments, attendance, notifications and logs

Revision ID: 20260301_0003
Revises: 20260301_0002
Create Date: 2026-03-01 00:20:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "20260301_0003"
down_revision = "20260301_0002"
branch_labels = None
depends_on = None


# Created with the leave_requests table.
leave_session_enum = postgresql.ENUM("morning", "afternoon", name="leave_session", create_type=False)
assignment_status_enum = sa.Enum("pending", "overridden", name="assignment_status")
attendance_status_enum = sa.Enum("present", "absent", "leave", "half-day", name="attendance_status")
notification_type_enum = sa.Enum(
    "leave_requested",
    "leave_approved",
    "leave_rejected",
    "replacement_assigned",
    "assignment_overridden",
    "attendance",
    "system",
    name="notification_type",
)


def upgrade() -> None:
    bind = op.get_bind()
    session_type = leave_session_enum if bind.dialect.name == "postgresql" else sa.String(length=20)

    op.create_table(
        "schedule_assignments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("timetable_id", sa.String(length=36), nullable=False),
        sa.Column("leave_request_id", sa.String(length=36), nullable=True),
        sa.Column("original_staff_id", sa.String(length=36), nullable=False),
        sa.Column("replacement_staff_id", sa.String(length=36), nullable=True),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("session", session_type, nullable=True),
        sa.Column("status", assignment_status_enum, nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    for column in ("timetable_id", "leave_request_id", "original_staff_id", "replacement_staff_id", "scheduled_date"):
        op.create_index(f"ix_schedule_assignments_{column}", "schedule_assignments", [column])

    op.create_table(
        "attendance",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("staff_id", sa.String(length=36), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", attendance_status_enum, nullable=False),
        sa.Column("check_in_time", sa.String(length=8), nullable=True),
        sa.Column("leave_session", session_type, nullable=True),
        sa.Column("is_locked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("override_reason", sa.Text(), nullable=True),
        sa.Column("overridden_by_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("staff_id", "date", name="uq_attendance_staff_date"),
    )
    op.create_index("ix_attendance_staff_id", "attendance", ["staff_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("notification_type", notification_type_enum, nullable=False, server_default="system"),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=True),
        sa.Column("entity_id", sa.String(length=36), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_user_id", "activity_logs", ["user_id"])
    op.create_index("ix_activity_logs_action", "activity_logs", ["action"])

    op.create_table(
        "access_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("login_time", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("logout_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("is_successful", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_access_logs_user_id", "access_logs", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_access_logs_user_id", table_name="access_logs")
    op.drop_table("access_logs")
    op.drop_index("ix_activity_logs_action", table_name="activity_logs")
    op.drop_index("ix_activity_logs_user_id", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_attendance_staff_id", table_name="attendance")
    op.drop_table("attendance")
    for column in ("timetable_id", "leave_request_id", "original_staff_id", "replacement_staff_id", "scheduled_date"):
        op.drop_index(f"ix_schedule_assignments_{column}", table_name="schedule_assignments")
    op.drop_table("schedule_assignments")
    bind = op.get_bind()
    notification_type_enum.drop(bind, checkfirst=True)
    attendance_status_enum.drop(bind, checkfirst=True)
    assignment_status_enum.drop(bind, checkfirst=True)
