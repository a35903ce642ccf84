from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import BreakType
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class BreakRecord:
    """Domain entity: a break inside a session. Open while ``break_end`` is None."""

    break_id: int
    session_id: int
    break_type: BreakType
    break_start: datetime
    break_end: Optional[datetime] = None
    notes: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.break_type, BreakType):
            raise ValidationError(f"break_type must be a BreakType, got {self.break_type!r}")
        if self.break_end is not None and self.break_end <= self.break_start:
            raise ValidationError("break_end must be after break_start")

    @property
    def is_open(self) -> bool:
        return self.break_end is None
