from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence, Union

from ..breaks.model import BreakRecord
from ..breaks.repository import BreakRepository
from ..breaks.service import BreakService
from ..common.datetime_utils import now_local, round_hours
from ..common.validators import require_after, require_not_before
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_REQUIRED_DAILY_HOURS
from ..core.enums import BreakType, Role, SessionStatus
from ..core.exceptions import (
    AlreadyClockedIn,
    AuthorizationError,
    InvalidState,
    SessionNotFound,
    ValidationError,
)
from ..durations.calculator import LiveCounters, live_counters, total_hours_at, with_forced_end, worked_duration
from .model import AttendanceSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)

NOT_CLOCKED_IN = "Not Clocked In"
WORKING = "Working"


@dataclass(frozen=True)
class LiveStatus:
    """What the clock widget shows for one employee at one instant."""

    label: str
    session: Optional[AttendanceSession] = None
    counters: Optional[LiveCounters] = None


@dataclass(frozen=True)
class ClockOutPreview:
    session_id: int
    worked: timedelta
    required: timedelta
    shortfall: timedelta

    @property
    def is_early(self) -> bool:
        return self.shortfall > timedelta(0)


@dataclass(frozen=True)
class SessionCorrection:
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    note: Optional[str] = None


class AttendanceService:
    def __init__(
        self,
        sessions: SessionRepository,
        breaks: BreakRepository,
        *,
        break_service: BreakService | None = None,
        required_daily_hours: float = DEFAULT_REQUIRED_DAILY_HOURS,
    ):
        self._sessions = sessions
        self._breaks = breaks
        self._break_service = break_service or BreakService(sessions, breaks)
        self._required_daily_hours = float(required_daily_hours)

    def get_session(self, session_id: int) -> AttendanceSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise SessionNotFound(f"Session {session_id} does not exist", session_id=session_id)
        return session

    def get_active_session(self, employee_id: int) -> Optional[AttendanceSession]:
        return self._sessions.get_active_for_employee(int(employee_id))

    def history(self, employee_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceSession]:
        return self._sessions.get_recent_for_employee(int(employee_id), int(limit))

    def clock_in(self, employee_id: int, *, now: datetime | None = None) -> AttendanceSession:
        now = now or now_local()

        existing = self._sessions.get_active_for_employee(int(employee_id))
        if existing:
            logger.warning("Clock-in rejected: employee %s already has active session %s", employee_id, existing.session_id)
            raise AlreadyClockedIn(
                "You already have an active session. Please clock out first.",
                session_id=existing.session_id,
                employee_id=int(employee_id),
            )

        session = self._sessions.create_session(employee_id=int(employee_id), clock_in=now)
        if session is None:
            logger.warning("Clock-in rejected by store guard: employee %s", employee_id)
            raise AlreadyClockedIn(
                "You already have an active session. Please clock out first.",
                employee_id=int(employee_id),
            )

        logger.info("Clocked in: employee=%s session=%s at=%s", employee_id, session.session_id, now.isoformat())
        return session

    def clock_out(self, session_id: int, *, now: datetime | None = None) -> AttendanceSession:
        """Close an active session.

        An open break is ended at the clock-out instant and counted as a
        completed break in ``total_hours``.
        """
        now = now or now_local()
        session = self.get_session(session_id)
        if not session.is_active:
            logger.warning("Clock-out rejected: session %s is %s", session_id, session.status.value)
            raise InvalidState(
                f"Session {session_id} is {session.status.value}, not active",
                session_id=session.session_id,
                employee_id=session.employee_id,
            )
        require_after(now, session.clock_in, "clock_out")

        breaks = self._breaks.list_for_session(session.session_id)
        for brk in breaks:
            if brk.is_open:
                require_after(now, brk.break_start, "clock_out")

        total_hours = total_hours_at(session, with_forced_end(breaks, now), now)
        if not self._sessions.close_session(session_id=session.session_id, clock_out=now, total_hours=total_hours):
            raise InvalidState(
                f"Session {session_id} was closed concurrently",
                session_id=session.session_id,
                employee_id=session.employee_id,
            )

        logger.info(
            "Clocked out: employee=%s session=%s total_hours=%.2f",
            session.employee_id,
            session.session_id,
            round_hours(total_hours),
        )
        return AttendanceSession(
            session_id=session.session_id,
            employee_id=session.employee_id,
            clock_in=session.clock_in,
            clock_out=now,
            status=SessionStatus.COMPLETED,
            total_hours=total_hours,
            note=session.note,
        )

    def correct(
        self,
        session_id: int,
        patch: SessionCorrection,
        *,
        current_role: Role,
    ) -> AttendanceSession:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can correct attendance sessions")

        session = self.get_session(session_id)
        if session.is_active:
            logger.warning("Correction rejected: session %s is still active", session_id)
            raise InvalidState(
                f"Session {session_id} is still active and cannot be corrected",
                session_id=session.session_id,
                employee_id=session.employee_id,
            )

        clock_in = patch.clock_in or session.clock_in
        clock_out = patch.clock_out or session.clock_out
        if clock_out <= clock_in:
            raise ValidationError("Clock-out cannot be before clock-in")
        note = (patch.note or "").strip() or session.note

        corrected = AttendanceSession(
            session_id=session.session_id,
            employee_id=session.employee_id,
            clock_in=clock_in,
            clock_out=clock_out,
            status=SessionStatus.CORRECTED,
            note=note,
        )
        breaks = self._breaks.list_for_session(session.session_id)
        for brk in breaks:
            require_not_before(brk.break_start, clock_in, "break_start")
            if brk.break_end is not None:
                require_not_before(clock_out, brk.break_end, "clock_out")
        total_hours = total_hours_at(corrected, breaks, clock_out)

        ok = self._sessions.mark_corrected(
            session_id=session.session_id,
            clock_in=clock_in,
            clock_out=clock_out,
            total_hours=total_hours,
            note=note,
        )
        if not ok:
            raise ValidationError("Correcting the session failed")

        logger.info("Session %s corrected: total_hours=%.2f", session.session_id, round_hours(total_hours))
        return AttendanceSession(
            session_id=corrected.session_id,
            employee_id=corrected.employee_id,
            clock_in=clock_in,
            clock_out=clock_out,
            status=SessionStatus.CORRECTED,
            total_hours=total_hours,
            note=note,
        )

    def start_break(
        self,
        session_id: int,
        break_type: Union[str, BreakType],
        *,
        now: datetime | None = None,
        notes: Optional[str] = None,
    ) -> BreakRecord:
        return self._break_service.start_break(session_id, break_type, now=now, notes=notes)

    def end_break(self, session_id: int, *, now: datetime | None = None) -> BreakRecord:
        return self._break_service.end_break(session_id, now=now)

    def live_status(self, employee_id: int, *, now: datetime | None = None) -> LiveStatus:
        now = now or now_local()
        session = self._sessions.get_active_for_employee(int(employee_id))
        if not session:
            return LiveStatus(label=NOT_CLOCKED_IN)

        breaks = self._break_service.list_breaks(session.session_id)
        counters = live_counters(session, breaks, now)
        label = f"On {counters.open_break.break_type.label}" if counters.on_break else WORKING
        return LiveStatus(label=label, session=session, counters=counters)

    def preview_clock_out(
        self,
        session_id: int,
        *,
        now: datetime | None = None,
        required_hours: float | None = None,
    ) -> ClockOutPreview:
        now = now or now_local()
        session = self.get_session(session_id)
        breaks = self._breaks.list_for_session(session.session_id)

        worked = worked_duration(session, breaks, now)
        required = timedelta(hours=self._required_daily_hours if required_hours is None else float(required_hours))
        return ClockOutPreview(
            session_id=session.session_id,
            worked=worked,
            required=required,
            shortfall=max(required - worked, timedelta(0)),
        )
