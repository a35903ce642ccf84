from __future__ import annotations

from ...core.enums import BreakStatus
from ..model import BreakUsage
from .base import BreakClassifier


class TieredBreakClassifier(BreakClassifier):
    """Three tiers: Warning between the combined limit and the warning threshold."""

    def decide(self, usage: BreakUsage) -> BreakStatus:
        policy = self.policy
        if usage.lunch_minutes > policy.lunch_limit_minutes:
            return BreakStatus.OVER_LIMIT
        if usage.other_minutes > policy.other_warning_minutes:
            return BreakStatus.OVER_LIMIT
        if usage.other_minutes > policy.other_combined_limit_minutes:
            return BreakStatus.WARNING
        return BreakStatus.OK
