"""
Reference clock for the company's local time.

Attendance "today" and the payroll work-day anchors (08:00 / 08:10 / 16:00)
are all local wall-clock times. The clock is injected as a FastAPI
dependency so tests can pin "now".
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo

from app.core.config import settings


def parse_utc_offset(tz_offset: str) -> timezone:
    """Turn ``"+07:00"`` / ``"-03:30"`` / ``"+7"`` into a fixed-offset tzinfo."""
    sign = 1 if tz_offset[0] == "+" else -1
    offset_parts = tz_offset[1:].split(":")
    offset_hours = int(offset_parts[0])
    offset_mins = int(offset_parts[1]) if len(offset_parts) > 1 else 0
    return timezone(timedelta(hours=sign * offset_hours, minutes=sign * offset_mins))


def ensure_utc(dt: datetime) -> datetime:
    """Normalise a potentially-naive timestamp read from the DB to UTC-aware."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class Clock:
    def __init__(self, tz: tzinfo) -> None:
        self.tz = tz

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> str:
        """Local calendar date (``YYYY-MM-DD``); the day boundary is local midnight."""
        return self.now().strftime("%Y-%m-%d")

    def to_local(self, dt: datetime) -> datetime:
        return ensure_utc(dt).astimezone(self.tz)

    def to_storage(self, dt: datetime) -> datetime:
        """Convert to UTC for persistence. Naive input is local wall-clock time."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=self.tz)
        return dt.astimezone(timezone.utc)


LOCAL_TZ = parse_utc_offset(settings.TIMEZONE_OFFSET)


def get_clock() -> Clock:
    """FastAPI dependency — the server clock in local company time."""
    return Clock(LOCAL_TZ)
