from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Sequence, Union

from ..attendance.model import AttendanceSession
from ..attendance.repository import SessionRepository
from ..breaks.model import BreakRecord
from ..breaks.repository import BreakRepository
from ..common.datetime_utils import elapsed, now_local, to_minutes
from ..core.enums import BreakType, RangePreset, ReportPeriod, SessionStatus
from ..core.exceptions import ValidationError
from ..policy.classifier.base import BreakClassifier
from ..policy.classifier.literal_classifier import LiteralBreakClassifier
from .model import (
    AnalyticsSummary,
    BreakLine,
    BreakTypeTally,
    EmployeeSummary,
    PeriodReport,
    SessionReportRow,
)

logger = logging.getLogger(__name__)


def period_start(period: Union[str, ReportPeriod], now: datetime) -> datetime:
    try:
        period = ReportPeriod(period)
    except ValueError:
        raise ValidationError(f"Unknown period {period!r} (expected week or month)")
    return now - timedelta(days=period.days)


def preset_range(
    preset: Union[str, RangePreset],
    now: datetime,
    *,
    custom_from: Optional[date] = None,
    custom_to: Optional[date] = None,
) -> tuple[datetime, datetime]:
    """Inclusive [start, end] of whole days for an analytics preset."""
    try:
        preset = RangePreset(preset)
    except ValueError:
        raise ValidationError(f"Unknown date range preset {preset!r}")

    today = now.date()
    if preset == RangePreset.YESTERDAY:
        first = last = today - timedelta(days=1)
    elif preset == RangePreset.THIS_WEEK:
        first = today - timedelta(days=today.weekday())
        last = first + timedelta(days=6)
    elif preset == RangePreset.THIS_MONTH:
        first = today.replace(day=1)
        last = today.replace(day=calendar.monthrange(today.year, today.month)[1])
    elif preset == RangePreset.CUSTOM:
        if not custom_from or not custom_to:
            raise ValidationError("Custom range needs both from and to dates")
        if custom_to < custom_from:
            raise ValidationError("Custom range ends before it starts")
        first, last = custom_from, custom_to
    else:
        first = last = today

    return datetime.combine(first, time.min), datetime.combine(last, time.max)


def timesheet_period(today: date) -> Optional[tuple[date, date]]:
    """Semi-monthly submission window, open on the 1st and the 15th only."""
    if today.day == 1:
        prev_last = today - timedelta(days=1)
        return prev_last.replace(day=16), prev_last
    if today.day == 15:
        return today.replace(day=1), today
    return None


def _sorted_sessions(sessions: Iterable[AttendanceSession]) -> list[AttendanceSession]:
    return sorted(sessions, key=lambda s: (s.clock_in, s.session_id), reverse=True)


def _sorted_breaks(breaks: Iterable[BreakRecord]) -> list[BreakRecord]:
    return sorted(breaks, key=lambda b: (b.break_start, b.break_id))


def _work_hours_display(session: AttendanceSession) -> str:
    if session.total_hours is not None:
        return f"{session.total_hours:.1f}h"
    if session.status == SessionStatus.ACTIVE:
        return "In progress"
    return "-"


class ReportService:
    """Read model over sessions and breaks. Never writes."""

    def __init__(
        self,
        sessions: SessionRepository,
        breaks: BreakRepository,
        *,
        classifier: Optional[BreakClassifier] = None,
    ):
        self._sessions = sessions
        self._breaks = breaks
        self._classifier = classifier or LiteralBreakClassifier()

    def _breaks_by_session(self, sessions: Sequence[AttendanceSession]) -> dict[int, list[BreakRecord]]:
        grouped: dict[int, list[BreakRecord]] = {s.session_id: [] for s in sessions}
        if not grouped:
            return grouped
        for brk in self._breaks.list_for_sessions(list(grouped)):
            if brk.session_id in grouped:
                grouped[brk.session_id].append(brk)
        for session_id in grouped:
            grouped[session_id] = _sorted_breaks(grouped[session_id])
        return grouped

    def _to_row(self, session: AttendanceSession, breaks: list[BreakRecord]) -> SessionReportRow:
        verdict = self._classifier.classify(breaks)
        lines = tuple(
            BreakLine(
                break_id=b.break_id,
                break_type=b.break_type,
                break_start=b.break_start,
                break_end=b.break_end,
                minutes=to_minutes(elapsed(b.break_start, b.break_end)) if b.break_end else None,
            )
            for b in breaks
        )
        return SessionReportRow(
            session_id=session.session_id,
            employee_id=session.employee_id,
            clock_in=session.clock_in,
            clock_out=session.clock_out,
            status=session.status,
            total_hours=session.total_hours,
            work_hours=_work_hours_display(session),
            lunch_minutes=verdict.lunch_minutes,
            other_minutes=verdict.other_minutes,
            break_status=verdict.status,
            breaks=lines,
        )

    @staticmethod
    def _summaries(sessions: Sequence[AttendanceSession]) -> tuple[EmployeeSummary, ...]:
        totals: dict[int, dict] = {}
        for s in sorted(sessions, key=lambda s: (s.employee_id, s.clock_in, s.session_id)):
            acc = totals.setdefault(s.employee_id, {"hours": 0.0, "sessions": 0, "in_progress": 0})
            acc["sessions"] += 1
            if s.total_hours is None:
                acc["in_progress"] += 1
            else:
                acc["hours"] += s.total_hours

        return tuple(
            EmployeeSummary(
                employee_id=employee_id,
                total_hours=acc["hours"],
                sessions=acc["sessions"],
                in_progress=acc["in_progress"],
            )
            for employee_id, acc in sorted(totals.items())
        )

    @staticmethod
    def _tallies(grouped: dict[int, list[BreakRecord]]) -> tuple[BreakTypeTally, ...]:
        counts = {t: 0 for t in BreakType}
        minutes = {t: 0.0 for t in BreakType}
        ongoing = {t: 0 for t in BreakType}

        every = _sorted_breaks(b for breaks in grouped.values() for b in breaks)
        for brk in every:
            if brk.break_end is None:
                ongoing[brk.break_type] += 1
                continue
            counts[brk.break_type] += 1
            minutes[brk.break_type] += to_minutes(elapsed(brk.break_start, brk.break_end))

        return tuple(
            BreakTypeTally(break_type=t, count=counts[t], minutes=minutes[t], ongoing=ongoing[t])
            for t in BreakType
        )

    def _build(
        self,
        *,
        start: datetime,
        end: Optional[datetime],
        employee_id: Optional[int],
        only_exceeded: bool = False,
    ) -> PeriodReport:
        sessions = _sorted_sessions(
            self._sessions.list_between(
                start=start,
                end=end,
                employee_id=int(employee_id) if employee_id is not None else None,
            )
        )
        grouped = self._breaks_by_session(sessions)

        if only_exceeded:
            sessions = [s for s in sessions if self._classifier.exceeds_other_limit(grouped[s.session_id])]
            grouped = {s.session_id: grouped[s.session_id] for s in sessions}

        rows = tuple(self._to_row(s, grouped[s.session_id]) for s in sessions)
        logger.debug("Built report %s..%s: %d session(s)", start, end, len(rows))
        return PeriodReport(
            start=start,
            end=end,
            rows=rows,
            employees=self._summaries(sessions),
            tallies=self._tallies(grouped),
        )

    def build_period_report(
        self,
        *,
        period: Union[str, ReportPeriod] = ReportPeriod.WEEK,
        now: datetime | None = None,
        employee_id: Optional[int] = None,
    ) -> PeriodReport:
        now = now or now_local()
        return self._build(start=period_start(period, now), end=None, employee_id=employee_id)

    def build_range_report(
        self,
        *,
        preset: Union[str, RangePreset] = RangePreset.TODAY,
        now: datetime | None = None,
        custom_from: Optional[date] = None,
        custom_to: Optional[date] = None,
        employee_id: Optional[int] = None,
        only_exceeded: bool = False,
    ) -> PeriodReport:
        now = now or now_local()
        start, end = preset_range(preset, now, custom_from=custom_from, custom_to=custom_to)
        return self._build(start=start, end=end, employee_id=employee_id, only_exceeded=only_exceeded)

    def summarize(self, report: PeriodReport) -> AnalyticsSummary:
        limit = self._classifier.policy.other_combined_limit_minutes
        active = [r for r in report.rows if r.status == SessionStatus.ACTIVE]
        return AnalyticsSummary(
            employees_tracked=len({r.employee_id for r in report.rows}),
            currently_working=sum(1 for r in active if not r.on_break),
            on_break=sum(1 for r in active if r.on_break),
            exceeded=sum(1 for r in report.rows if r.lunch_minutes + r.other_minutes > limit),
        )

    def total_hours_between(self, employee_id: int, *, start: date, end: date) -> float:
        sessions = self._sessions.list_between(
            start=datetime.combine(start, time.min),
            end=datetime.combine(end, time.max),
            employee_id=int(employee_id),
        )
        return sum(s.total_hours or 0.0 for s in _sorted_sessions(sessions))
