from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Iterable, Optional

import pytest

from timekeeping.attendance.model import AttendanceSession
from timekeeping.breaks.model import BreakRecord
from timekeeping.container import build_services
from timekeeping.core.enums import BreakType, SessionStatus


class InMemoryBreaks:
    def __init__(self, lock: threading.Lock | None = None):
        self.lock = lock or threading.RLock()
        self._by_id: dict[int, BreakRecord] = {}
        self._id = 0
        self.sessions = None

    def get_open_for_session(self, session_id: int) -> Optional[BreakRecord]:
        return next((b for b in self._by_id.values() if b.session_id == session_id and b.is_open), None)

    def list_for_session(self, session_id: int):
        return [b for b in self._by_id.values() if b.session_id == session_id]

    def list_for_sessions(self, session_ids: Iterable[int]):
        ids = set(session_ids)
        return [b for b in self._by_id.values() if b.session_id in ids]

    def create_break(self, *, session_id: int, break_type: BreakType, break_start: datetime, notes=None):
        with self.lock:
            session = self.sessions.get_by_id(session_id) if self.sessions is not None else None
            if self.sessions is not None and (session is None or not session.is_active):
                return None
            if self.get_open_for_session(session_id):
                return None
            self._id += 1
            rec = BreakRecord(
                break_id=self._id,
                session_id=session_id,
                break_type=break_type,
                break_start=break_start,
                notes=notes,
            )
            self._by_id[rec.break_id] = rec
            return rec

    def end_break(self, *, break_id: int, break_end: datetime) -> bool:
        with self.lock:
            b = self._by_id.get(break_id)
            if b is None or not b.is_open:
                return False
            self._by_id[break_id] = BreakRecord(
                break_id=b.break_id,
                session_id=b.session_id,
                break_type=b.break_type,
                break_start=b.break_start,
                break_end=break_end,
                notes=b.notes,
            )
            return True

    def add(self, rec: BreakRecord) -> BreakRecord:
        self._by_id[rec.break_id] = rec
        self._id = max(self._id, rec.break_id)
        return rec


class InMemorySessions:
    def __init__(self, breaks: InMemoryBreaks):
        self.lock = breaks.lock
        self._breaks = breaks
        breaks.sessions = self
        self._by_id: dict[int, AttendanceSession] = {}
        self._id = 0

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        return self._by_id.get(session_id)

    def get_active_for_employee(self, employee_id: int) -> Optional[AttendanceSession]:
        return next((s for s in self._by_id.values() if s.employee_id == employee_id and s.is_active), None)

    def get_recent_for_employee(self, employee_id: int, limit: int):
        items = [s for s in self._by_id.values() if s.employee_id == employee_id]
        items.sort(key=lambda s: s.clock_in, reverse=True)
        return items[:limit]

    def create_session(self, *, employee_id: int, clock_in: datetime):
        with self.lock:
            if any(s.employee_id == employee_id and s.is_active for s in self._by_id.values()):
                return None
            self._id += 1
            rec = AttendanceSession(
                session_id=self._id,
                employee_id=employee_id,
                clock_in=clock_in,
                clock_out=None,
                status=SessionStatus.ACTIVE,
            )
            self._by_id[rec.session_id] = rec
            return rec

    def close_session(self, *, session_id: int, clock_out: datetime, total_hours: float) -> bool:
        with self.lock:
            s = self._by_id.get(session_id)
            if s is None or not s.is_active:
                return False
            open_break = self._breaks.get_open_for_session(session_id)
            if open_break:
                self._breaks.end_break(break_id=open_break.break_id, break_end=clock_out)
            self._by_id[session_id] = AttendanceSession(
                session_id=s.session_id,
                employee_id=s.employee_id,
                clock_in=s.clock_in,
                clock_out=clock_out,
                status=SessionStatus.COMPLETED,
                total_hours=total_hours,
                note=s.note,
            )
            return True

    def mark_corrected(self, *, session_id: int, clock_in: datetime, clock_out: datetime, total_hours: float, note=None) -> bool:
        with self.lock:
            s = self._by_id.get(session_id)
            if s is None or s.is_active:
                return False
            self._by_id[session_id] = AttendanceSession(
                session_id=s.session_id,
                employee_id=s.employee_id,
                clock_in=clock_in,
                clock_out=clock_out,
                status=SessionStatus.CORRECTED,
                total_hours=total_hours,
                note=note,
            )
            return True

    def list_between(self, *, start: datetime, end: Optional[datetime] = None, employee_id: Optional[int] = None):
        return [
            s
            for s in self._by_id.values()
            if s.clock_in >= start
            and (end is None or s.clock_in <= end)
            and (employee_id is None or s.employee_id == employee_id)
        ]

    def add(self, rec: AttendanceSession) -> AttendanceSession:
        self._by_id[rec.session_id] = rec
        self._id = max(self._id, rec.session_id)
        return rec


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def closed_session(session_id, employee_id, clock_in, clock_out, *, total_hours=None, status=SessionStatus.COMPLETED):
    if total_hours is None:
        total_hours = (clock_out - clock_in).total_seconds() / 3600
    return AttendanceSession(
        session_id=session_id,
        employee_id=employee_id,
        clock_in=clock_in,
        clock_out=clock_out,
        status=status,
        total_hours=total_hours,
    )


def active_session(session_id, employee_id, clock_in):
    return AttendanceSession(
        session_id=session_id,
        employee_id=employee_id,
        clock_in=clock_in,
        clock_out=None,
        status=SessionStatus.ACTIVE,
    )


def brk(break_id, session_id, break_type, start, end=None):
    return BreakRecord(
        break_id=break_id,
        session_id=session_id,
        break_type=BreakType(break_type),
        break_start=start,
        break_end=end,
    )


@pytest.fixture
def fixed_now():
    return datetime(2026, 2, 2, 9, 0, 0)


@pytest.fixture
def breaks_repo():
    return InMemoryBreaks()


@pytest.fixture
def sessions_repo(breaks_repo):
    return InMemorySessions(breaks_repo)


@pytest.fixture
def clock(fixed_now):
    return FakeClock(fixed_now)


@pytest.fixture
def container(sessions_repo, breaks_repo, clock):
    return build_services(sessions_repo, breaks_repo, clock=clock)
