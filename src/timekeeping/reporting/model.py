from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import BreakStatus, BreakType, SessionStatus


@dataclass(frozen=True)
class BreakLine:
    """Drill-down row for one break. ``minutes`` is None while ongoing."""

    break_id: int
    break_type: BreakType
    break_start: datetime
    break_end: Optional[datetime]
    minutes: Optional[float]

    @property
    def label(self) -> str:
        return self.break_type.label


@dataclass(frozen=True)
class SessionReportRow:
    """Read-model: one session joined with its breaks and classification."""

    session_id: int
    employee_id: int
    clock_in: datetime
    clock_out: Optional[datetime]
    status: SessionStatus
    total_hours: Optional[float]
    work_hours: str
    lunch_minutes: float
    other_minutes: float
    break_status: BreakStatus
    breaks: tuple[BreakLine, ...] = ()

    @property
    def on_break(self) -> bool:
        return any(b.break_end is None for b in self.breaks)


@dataclass(frozen=True)
class EmployeeSummary:
    employee_id: int
    total_hours: float
    sessions: int
    in_progress: int


@dataclass(frozen=True)
class BreakTypeTally:
    break_type: BreakType
    count: int
    minutes: float
    ongoing: int = 0


@dataclass(frozen=True)
class PeriodReport:
    start: datetime
    end: Optional[datetime]
    rows: tuple[SessionReportRow, ...]
    employees: tuple[EmployeeSummary, ...]
    tallies: tuple[BreakTypeTally, ...]

    @property
    def total_hours(self) -> float:
        return sum(e.total_hours for e in self.employees)


@dataclass(frozen=True)
class AnalyticsSummary:
    employees_tracked: int
    currently_working: int
    on_break: int
    exceeded: int
