from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role supplied by the identity collaborator."""

    ADMIN = "admin"
    STAFF = "staff"


class SessionStatus(str, Enum):
    """Lifecycle tag of an attendance session as stored in the database."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CORRECTED = "corrected"


class BreakType(str, Enum):
    """Kinds of break an employee can take inside a session."""

    LUNCH = "lunch"
    COFFEE = "coffee"
    BATHROOM = "bathroom"
    PERSONAL = "personal"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _BREAK_LABELS[self]

    @property
    def is_lunch(self) -> bool:
        return self is BreakType.LUNCH


_BREAK_LABELS = {
    BreakType.LUNCH: "Lunch Break",
    BreakType.COFFEE: "Coffee Break",
    BreakType.BATHROOM: "Bathroom/CR",
    BreakType.PERSONAL: "Personal Break",
    BreakType.OTHER: "Other",
}


class BreakStatus(str, Enum):
    """Verdict on a session's break usage against the break policy."""

    OK = "OK"
    WARNING = "Warning"
    OVER_LIMIT = "Over Limit"


class ReportPeriod(str, Enum):
    """Trailing windows offered by the attendance history view."""

    WEEK = "week"
    MONTH = "month"

    @property
    def days(self) -> int:
        return 7 if self is ReportPeriod.WEEK else 30


class RangePreset(str, Enum):
    """Date-range presets offered by the attendance analytics view."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    CUSTOM = "custom"


class ClassificationMode(str, Enum):
    LITERAL = "literal"
    TIERED = "tiered"
