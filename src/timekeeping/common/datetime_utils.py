from __future__ import annotations

from datetime import date, datetime, timedelta

from ..core.constants import SECONDS_PER_HOUR
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)") from None


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (``2026-02-01T09:00:00``)."""
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"Invalid timestamp {value!r}") from None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def elapsed(start: datetime, end: datetime) -> timedelta:
    return end - start


def to_minutes(duration: timedelta) -> float:
    return duration.total_seconds() / 60


def to_hours(duration: timedelta) -> float:
    return duration.total_seconds() / SECONDS_PER_HOUR


def round_hours(hours: float) -> float:
    """Two-decimal rounding used for display only."""
    return round(hours, 2)


def format_hms(duration: timedelta) -> str:
    """Live counter format ``HH:MM:SS``; hours are not wrapped at 24."""
    total = max(int(duration.total_seconds()), 0)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_minutes(minutes: float) -> str:
    """Break total format: ``45m`` under an hour, ``1h 5m`` otherwise."""
    if minutes < 60:
        return f"{round(minutes)}m"
    hours = int(minutes // 60)
    mins = round(minutes % 60)
    return f"{hours}h {mins}m"


def format_hours_minutes(hours: int, minutes: int) -> str:
    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"
