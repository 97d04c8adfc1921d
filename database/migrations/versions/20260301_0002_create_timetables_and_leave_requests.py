"""create timetables and leave requests

Revision ID: 20260301_0002
Revises: 20260301_0001
Create Date: 2026-03-01 00:10:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20260301_0002"
down_revision = "20260301_0001"
branch_labels = None
depends_on = None


leave_type_enum = sa.Enum("full_day", "half_day", name="leave_type")
leave_session_enum = sa.Enum("morning", "afternoon", name="leave_session")
leave_status_enum = sa.Enum("pending", "approved", "rejected", name="leave_status")


def upgrade() -> None:
    op.create_table(
        "timetables",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("staff_id", sa.String(length=36), nullable=False),
        sa.Column("course_name", sa.String(length=200), nullable=False),
        sa.Column("course_code", sa.String(length=50), nullable=True),
        sa.Column("day_of_week", sa.String(length=10), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("classroom", sa.String(length=100), nullable=True),
        sa.Column("batch", sa.String(length=100), nullable=True),
        sa.Column("semester", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_timetables_staff_id", "timetables", ["staff_id"])

    op.create_table(
        "leave_requests",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("staff_id", sa.String(length=36), nullable=False),
        sa.Column("leave_type", leave_type_enum, nullable=False),
        sa.Column("session", leave_session_enum, nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("emergency_contact", sa.String(length=100), nullable=True),
        sa.Column("status", leave_status_enum, nullable=False, server_default="pending"),
        sa.Column("approved_by_id", sa.String(length=36), nullable=True),
        sa.Column("admin_comments", sa.Text(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_leave_requests_staff_id", "leave_requests", ["staff_id"])
    op.create_index("ix_leave_requests_status", "leave_requests", ["status"])


def downgrade() -> None:
    op.drop_index("ix_leave_requests_status", table_name="leave_requests")
    op.drop_index("ix_leave_requests_staff_id", table_name="leave_requests")
    op.drop_table("leave_requests")
    op.drop_index("ix_timetables_staff_id", table_name="timetables")
    op.drop_table("timetables")
    bind = op.get_bind()
    leave_status_enum.drop(bind, checkfirst=True)
    leave_session_enum.drop(bind, checkfirst=True)
    leave_type_enum.drop(bind, checkfirst=True)
