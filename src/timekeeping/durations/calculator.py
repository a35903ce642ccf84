"""Duration queries over session and break records.

All functions are pure: the same records and the same ``now`` always give
the same answer. Only completed breaks reduce worked time; an open break is
subtracted once it ends.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceSession
from ..breaks.model import BreakRecord
from ..common.datetime_utils import elapsed, to_hours


def completed_break_total(breaks: Iterable[BreakRecord]) -> timedelta:
    total = timedelta(0)
    for brk in breaks:
        if brk.break_end is not None:
            total += elapsed(brk.break_start, brk.break_end)
    return total


def worked_duration(session: AttendanceSession, breaks: Iterable[BreakRecord], now: datetime) -> timedelta:
    end = now if session.clock_out is None else min(now, session.clock_out)
    return elapsed(session.clock_in, end) - completed_break_total(breaks)


def break_duration(brk: BreakRecord, now: datetime) -> timedelta:
    if brk.break_end is None:
        return elapsed(brk.break_start, now)
    return elapsed(brk.break_start, brk.break_end)


def total_hours_at(session: AttendanceSession, breaks: Iterable[BreakRecord], clock_out: datetime) -> float:
    """Closed-form ``totalHours`` evaluated at ``clock_out`` (full precision)."""
    return to_hours(worked_duration(session, breaks, clock_out))


def with_forced_end(breaks: Sequence[BreakRecord], at: datetime) -> list[BreakRecord]:
    """Copy of ``breaks`` where an open break is ended at ``at``."""
    out = []
    for brk in breaks:
        if brk.break_end is None:
            brk = BreakRecord(
                break_id=brk.break_id,
                session_id=brk.session_id,
                break_type=brk.break_type,
                break_start=brk.break_start,
                break_end=at,
                notes=brk.notes,
            )
        out.append(brk)
    return out


@dataclass(frozen=True)
class LiveCounters:
    """Snapshot of one session's counters at one instant."""

    now: datetime
    worked: timedelta
    completed_break_total: timedelta
    completed_breaks: int
    open_break: Optional[BreakRecord] = None
    open_break_elapsed: Optional[timedelta] = None

    @property
    def on_break(self) -> bool:
        return self.open_break is not None


def live_counters(session: AttendanceSession, breaks: Sequence[BreakRecord], now: datetime) -> LiveCounters:
    open_break = next((b for b in breaks if b.is_open), None)
    return LiveCounters(
        now=now,
        worked=worked_duration(session, breaks, now),
        completed_break_total=completed_break_total(breaks),
        completed_breaks=sum(1 for b in breaks if not b.is_open),
        open_break=open_break,
        open_break_elapsed=break_duration(open_break, now) if open_break else None,
    )
