from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import BreakType
from .model import BreakRecord


class BreakRepository(Protocol):
    def get_open_for_session(self, session_id: int) -> Optional[BreakRecord]:
        raise NotImplementedError

    def list_for_session(self, session_id: int) -> Sequence[BreakRecord]:
        raise NotImplementedError

    def list_for_sessions(self, session_ids: Iterable[int]) -> Sequence[BreakRecord]:
        raise NotImplementedError

    def create_break(
        self,
        *,
        session_id: int,
        break_type: BreakType,
        break_start: datetime,
        notes: Optional[str] = None,
    ) -> Optional[BreakRecord]:
        """Insert an open break.

        Must be atomic with the "no open break for this session" and the
        "session is still active" guards: returns None when either rejects
        the insert.
        """

        raise NotImplementedError

    def end_break(self, *, break_id: int, break_end: datetime) -> bool:
        """Set ``break_end`` once. Returns False if the break was already closed."""

        raise NotImplementedError
