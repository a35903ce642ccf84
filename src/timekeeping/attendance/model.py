from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import SessionStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one clock-in to clock-out session of an employee.

    ``total_hours`` is stored at full precision once the session closes and
    stays ``None`` while it is open.
    """

    session_id: int
    employee_id: int
    clock_in: datetime
    clock_out: Optional[datetime]
    status: SessionStatus
    total_hours: Optional[float] = None
    note: Optional[str] = None

    def __post_init__(self):
        if self.clock_out is not None and self.clock_out <= self.clock_in:
            raise ValidationError("clock_out must be after clock_in")
        if (self.status == SessionStatus.ACTIVE) != (self.clock_out is None):
            raise ValidationError(f"status {self.status.value} does not match clock_out={self.clock_out!r}")

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE
