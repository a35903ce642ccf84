from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ...core.enums import ClassificationMode
from ...core.exceptions import ValidationError
from ..model import BreakPolicy
from .base import BreakClassifier
from .literal_classifier import LiteralBreakClassifier
from .tiered_classifier import TieredBreakClassifier


@dataclass
class BreakClassifierFactory:
    """Factory Pattern: choose the classification strategy from configuration."""

    policy: BreakPolicy

    def for_mode(self, mode: Union[str, ClassificationMode]) -> BreakClassifier:
        try:
            mode = ClassificationMode(mode)
        except ValueError:
            raise ValidationError(f"Unknown break classification mode {mode!r}")

        if mode == ClassificationMode.TIERED:
            return TieredBreakClassifier(self.policy)
        return LiteralBreakClassifier(self.policy)
