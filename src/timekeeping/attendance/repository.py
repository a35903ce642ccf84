from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceSession


class SessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_active_for_employee(self, employee_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def create_session(self, *, employee_id: int, clock_in: datetime) -> Optional[AttendanceSession]:
        """Insert an active session.

        Must be atomic with the "no active session for this employee" guard:
        returns None when the guard rejects the insert.
        """

        raise NotImplementedError

    def close_session(self, *, session_id: int, clock_out: datetime, total_hours: float) -> bool:
        """Close an active session and end its open break at ``clock_out``.

        Both writes happen in one transaction. Returns False when the session
        was not active anymore.
        """

        raise NotImplementedError

    def mark_corrected(
        self,
        *,
        session_id: int,
        clock_in: datetime,
        clock_out: datetime,
        total_hours: float,
        note: Optional[str] = None,
    ) -> bool:
        """Admin-only override of a closed session."""

        raise NotImplementedError

    def list_between(
        self,
        *,
        start: datetime,
        end: Optional[datetime] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceSession]:
        """Sessions with ``start <= clock_in`` (and ``clock_in <= end`` when given)."""

        raise NotImplementedError
