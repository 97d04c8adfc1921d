from __future__ import annotations

import logging

from sqlalchemy import inspect, text

from app.core.config import get_settings
from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "email", "role", "is_active"},
    "staff": {"id", "user_id", "is_active"},
    "timetables": {"id", "staff_id", "day_of_week", "start_time", "is_active"},
    "leave_requests": {"id", "staff_id", "leave_type", "session", "start_date", "end_date", "status"},
    "schedule_assignments": {"id", "timetable_id", "replacement_staff_id", "scheduled_date", "session"},
    "attendance": {"id", "staff_id", "date", "is_locked", "leave_session"},
}

# Columns added after the first release of the attendance table.
ATTENDANCE_LATE_COLUMNS: dict[str, str] = {
    "leave_session": "VARCHAR(20)",
    "is_locked": "BOOLEAN NOT NULL DEFAULT FALSE",
    "override_reason": "TEXT",
    "overridden_by_id": "VARCHAR(36)",
}


def _ensure_attendance_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "attendance" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("attendance")}
        for column_name, ddl in ATTENDANCE_LATE_COLUMNS.items():
            if column_name in column_names:
                continue
            logger.info("Adding missing attendance.%s column", column_name)
            connection.execute(text(f"ALTER TABLE attendance ADD COLUMN {column_name} {ddl}"))


def missing_schema_items() -> tuple[list[str], dict[str, list[str]]]:
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    with engine.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        for table_name, columns in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                missing_tables.append(table_name)
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(columns - existing)
            if missing:
                missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_runtime_schema_compatibility() -> None:
    import app.models  # noqa: F401

    if get_settings().database_auto_create:
        Base.metadata.create_all(bind=engine)
    _ensure_attendance_columns()
