from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..core.constants import (
    DEFAULT_LUNCH_LIMIT_MINUTES,
    DEFAULT_OTHER_LIMIT_MINUTES,
    DEFAULT_OTHER_WARNING_MINUTES,
)
from ..core.enums import BreakStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class BreakPolicy:
    """Process-wide break limits, in minutes.

    ``other_*`` limits apply to the combined total of every non-lunch break
    in a session.
    """

    lunch_limit_minutes: float = DEFAULT_LUNCH_LIMIT_MINUTES
    other_combined_limit_minutes: float = DEFAULT_OTHER_LIMIT_MINUTES
    other_warning_minutes: float = DEFAULT_OTHER_WARNING_MINUTES

    def __post_init__(self):
        if self.lunch_limit_minutes <= 0 or self.other_combined_limit_minutes <= 0:
            raise ValidationError("Break limits must be positive")
        if self.other_warning_minutes < self.other_combined_limit_minutes:
            raise ValidationError("other_warning_minutes cannot be below other_combined_limit_minutes")

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "BreakPolicy":
        return cls(
            lunch_limit_minutes=float(settings.get("BREAK_LUNCH_LIMIT_MINUTES", DEFAULT_LUNCH_LIMIT_MINUTES)),
            other_combined_limit_minutes=float(settings.get("BREAK_OTHER_LIMIT_MINUTES", DEFAULT_OTHER_LIMIT_MINUTES)),
            other_warning_minutes=float(settings.get("BREAK_OTHER_WARNING_MINUTES", DEFAULT_OTHER_WARNING_MINUTES)),
        )


@dataclass(frozen=True)
class BreakUsage:
    lunch_minutes: float
    other_minutes: float

    @property
    def total_minutes(self) -> float:
        return self.lunch_minutes + self.other_minutes


@dataclass(frozen=True)
class BreakClassification:
    status: BreakStatus
    lunch_minutes: float
    other_minutes: float
