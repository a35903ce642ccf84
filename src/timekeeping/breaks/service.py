from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence, Union

from ..attendance.model import AttendanceSession
from ..attendance.repository import SessionRepository
from ..common.datetime_utils import now_local
from ..common.validators import parse_break_type, require_after, require_not_before
from ..core.enums import BreakType
from ..core.exceptions import BreakAlreadyOpen, NoOpenBreak, SessionNotActive, SessionNotFound
from .model import BreakRecord
from .repository import BreakRepository

logger = logging.getLogger(__name__)


class BreakService:
    """Starts and ends breaks, one open break per session at most.

    Invariants are checked before any write; the repository repeats the
    open-break check atomically so a double submit cannot slip through.
    Durations and classification live in ``durations`` and ``policy``.
    """

    def __init__(self, sessions: SessionRepository, breaks: BreakRepository):
        self._sessions = sessions
        self._breaks = breaks

    def _require_active(self, session_id: int) -> AttendanceSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise SessionNotFound(f"Session {session_id} does not exist", session_id=session_id)
        if not session.is_active:
            logger.warning("Break transition rejected: session %s is %s", session_id, session.status.value)
            raise SessionNotActive(
                f"Session {session_id} is {session.status.value}, not active",
                session_id=session.session_id,
                employee_id=session.employee_id,
            )
        return session

    def start_break(
        self,
        session_id: int,
        break_type: Union[str, BreakType],
        *,
        now: datetime | None = None,
        notes: Optional[str] = None,
    ) -> BreakRecord:
        now = now or now_local()
        kind = parse_break_type(break_type)
        session = self._require_active(session_id)
        require_not_before(now, session.clock_in, "break_start")

        if self._breaks.get_open_for_session(session.session_id):
            logger.warning("Break start rejected: session %s already has an open break", session.session_id)
            raise BreakAlreadyOpen(
                f"Session {session.session_id} already has an open break",
                session_id=session.session_id,
                employee_id=session.employee_id,
            )

        record = self._breaks.create_break(
            session_id=session.session_id,
            break_type=kind,
            break_start=now,
            notes=(notes or "").strip() or None,
        )
        if record is None:
            logger.warning("Break start rejected by store guard: session %s", session.session_id)
            self._require_active(session.session_id)
            raise BreakAlreadyOpen(
                f"Session {session.session_id} already has an open break",
                session_id=session.session_id,
                employee_id=session.employee_id,
            )

        logger.info("%s started: session=%s break=%s", kind.label, session.session_id, record.break_id)
        return record

    def end_break(self, session_id: int, *, now: datetime | None = None) -> BreakRecord:
        now = now or now_local()
        session = self._require_active(session_id)

        open_break = self._breaks.get_open_for_session(session.session_id)
        if not open_break:
            logger.warning("Break end rejected: session %s has no open break", session.session_id)
            raise NoOpenBreak(
                f"Session {session.session_id} has no open break",
                session_id=session.session_id,
                employee_id=session.employee_id,
            )
        require_after(now, open_break.break_start, "break_end")

        if not self._breaks.end_break(break_id=open_break.break_id, break_end=now):
            raise NoOpenBreak(
                f"Break {open_break.break_id} was already ended",
                session_id=session.session_id,
                employee_id=session.employee_id,
            )

        logger.info("%s ended: session=%s break=%s", open_break.break_type.label, session.session_id, open_break.break_id)
        return BreakRecord(
            break_id=open_break.break_id,
            session_id=open_break.session_id,
            break_type=open_break.break_type,
            break_start=open_break.break_start,
            break_end=now,
            notes=open_break.notes,
        )

    def get_open_break(self, session_id: int) -> Optional[BreakRecord]:
        return self._breaks.get_open_for_session(int(session_id))

    def list_breaks(self, session_id: int) -> Sequence[BreakRecord]:
        return sorted(self._breaks.list_for_session(int(session_id)), key=lambda b: b.break_start)
