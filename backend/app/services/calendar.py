from __future__ import annotations

from collections.abc import Iterator
from datetime import date, timedelta

from app.models.leave_request import LeaveSession
from app.schemas.common import parse_time_to_minutes

# Classes starting before noon belong to the morning session. This is a fixed
# institution-wide boundary, not a setting.
MORNING_CUTOFF_HOUR = 12

def iter_dates(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)

def session_for_start_time(start_time: str) -> LeaveSession:
    start_hour = parse_time_to_minutes(start_time) // 60
    if start_hour < MORNING_CUTOFF_HOUR:
        return LeaveSession.morning
    return LeaveSession.afternoon
