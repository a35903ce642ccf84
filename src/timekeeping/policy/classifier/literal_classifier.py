from __future__ import annotations

from ...core.enums import BreakStatus
from ..model import BreakUsage
from .base import BreakClassifier


class LiteralBreakClassifier(BreakClassifier):
    """Over Limit is checked first, so Warning can never be returned.

    Same precedence as the badges on the break-time report.
    """

    def decide(self, usage: BreakUsage) -> BreakStatus:
        policy = self.policy
        lunch_over = usage.lunch_minutes > policy.lunch_limit_minutes
        other_over = usage.other_minutes > policy.other_combined_limit_minutes
        other_warning = policy.other_combined_limit_minutes < usage.other_minutes <= policy.other_warning_minutes

        if lunch_over or other_over:
            return BreakStatus.OVER_LIMIT
        if other_warning:
            return BreakStatus.WARNING
        return BreakStatus.OK
