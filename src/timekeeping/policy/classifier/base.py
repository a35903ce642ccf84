from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from ...breaks.model import BreakRecord
from ...common.datetime_utils import elapsed, to_minutes
from ...core.enums import BreakStatus
from ..model import BreakClassification, BreakPolicy, BreakUsage


def break_usage(breaks: Iterable[BreakRecord]) -> BreakUsage:
    """Lunch vs. other minutes over completed breaks; open breaks are ignored."""
    lunch = 0.0
    other = 0.0
    for brk in breaks:
        if brk.break_end is None:
            continue
        minutes = to_minutes(elapsed(brk.break_start, brk.break_end))
        if brk.break_type.is_lunch:
            lunch += minutes
        else:
            other += minutes
    return BreakUsage(lunch_minutes=lunch, other_minutes=other)


class BreakClassifier(ABC):
    """Strategy Pattern: decide OK / Warning / Over Limit for one session."""

    def __init__(self, policy: BreakPolicy | None = None):
        self.policy = policy or BreakPolicy()

    def classify(self, breaks: Iterable[BreakRecord]) -> BreakClassification:
        usage = break_usage(breaks)
        return BreakClassification(
            status=self.decide(usage),
            lunch_minutes=usage.lunch_minutes,
            other_minutes=usage.other_minutes,
        )

    def exceeds_other_limit(self, breaks: Iterable[BreakRecord]) -> bool:
        """Total completed break time above the combined limit (analytics filter)."""
        return break_usage(breaks).total_minutes > self.policy.other_combined_limit_minutes

    @abstractmethod
    def decide(self, usage: BreakUsage) -> BreakStatus:
        raise NotImplementedError
