from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

import mysql.connector

from ..core.enums import BreakType, SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import BreakRecord
from .repository import BreakRepository

_COLUMNS = "break_id, session_id, break_type, break_start, break_end, notes"


def _to_break(r: dict) -> BreakRecord:
    return BreakRecord(
        break_id=int(r["break_id"]),
        session_id=int(r["session_id"]),
        break_type=BreakType(r["break_type"]),
        break_start=r["break_start"],
        break_end=r.get("break_end"),
        notes=r.get("notes"),
    )


class MySQLBreakRepository(BreakRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_open_for_session(self, session_id: int) -> Optional[BreakRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_breaks WHERE session_id=%s AND break_end IS NULL",
                (int(session_id),),
            )
            r = fetchone(cur)
            return _to_break(r) if r else None

    def list_for_session(self, session_id: int) -> Sequence[BreakRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_breaks WHERE session_id=%s ORDER BY break_start ASC, break_id ASC",
                (int(session_id),),
            )
            return [_to_break(r) for r in fetchall(cur)]

    def list_for_sessions(self, session_ids: Iterable[int]) -> Sequence[BreakRecord]:
        ids = sorted({int(i) for i in session_ids})
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_breaks
                WHERE session_id IN ({placeholders})
                ORDER BY break_start ASC, break_id ASC
                """,
                tuple(ids),
            )
            return [_to_break(r) for r in fetchall(cur)]

    def create_break(
        self,
        *,
        session_id: int,
        break_type: BreakType,
        break_start: datetime,
        notes: Optional[str] = None,
    ) -> Optional[BreakRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_breaks(session_id, break_type, break_start, notes)
                    SELECT session_id, %s, %s, %s
                    FROM attendance_sessions
                    WHERE session_id=%s AND status=%s
                    """,
                    (break_type.value, break_start, notes, int(session_id), SessionStatus.ACTIVE.value),
                )
            except mysql.connector.IntegrityError as err:
                if is_duplicate_key(err):
                    return None
                raise
            if cur.rowcount == 0:
                return None
            return BreakRecord(
                break_id=int(cur.lastrowid),
                session_id=int(session_id),
                break_type=break_type,
                break_start=break_start,
                notes=notes,
            )

    def end_break(self, *, break_id: int, break_end: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_breaks SET break_end=%s WHERE break_id=%s AND break_end IS NULL",
                (break_end, int(break_id)),
            )
            return cur.rowcount > 0
