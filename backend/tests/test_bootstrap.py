from sqlalchemy import create_engine, inspect, text
from sqlalchemy.pool import StaticPool

from app.db import bootstrap


def _bare_engine():
    return create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def test_missing_attendance_columns_are_added(monkeypatch):
    legacy = _bare_engine()
    with legacy.begin() as connection:
        connection.execute(
            text("CREATE TABLE attendance (id VARCHAR(36) PRIMARY KEY, staff_id VARCHAR(36), date DATE, status VARCHAR(20))")
        )
    monkeypatch.setattr(bootstrap, "engine", legacy)

    bootstrap.ensure_runtime_schema_compatibility()

    columns = {item["name"] for item in inspect(legacy).get_columns("attendance")}
    assert set(bootstrap.ATTENDANCE_LATE_COLUMNS) <= columns
    missing_tables, missing_columns = bootstrap.missing_schema_items()
    assert "users" in missing_tables
    assert "attendance" not in missing_columns


def test_complete_schema_reports_nothing_missing(monkeypatch, engine):
    monkeypatch.setattr(bootstrap, "engine", engine)

    assert bootstrap.missing_schema_items() == ([], {})


def test_auto_create_builds_every_table(monkeypatch):
    fresh = _bare_engine()
    monkeypatch.setattr(bootstrap, "engine", fresh)
    monkeypatch.setattr(bootstrap.get_settings(), "database_auto_create", True)

    bootstrap.ensure_runtime_schema_compatibility()

    assert bootstrap.missing_schema_items() == ([], {})
