from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import GuardRejected, db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceSession
from .repository import SessionRepository

_COLUMNS = "session_id, employee_id, clock_in, clock_out, status, total_hours, note"


def _to_session(r: dict) -> AttendanceSession:
    total = r.get("total_hours")
    return AttendanceSession(
        session_id=int(r["session_id"]),
        employee_id=int(r["employee_id"]),
        clock_in=r["clock_in"],
        clock_out=r.get("clock_out"),
        status=SessionStatus(r["status"]),
        total_hours=float(total) if total is not None else None,
        note=r.get("note"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_active_for_employee(self, employee_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_sessions WHERE employee_id=%s AND status=%s",
                (int(employee_id), SessionStatus.ACTIVE.value),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE employee_id=%s
                ORDER BY clock_in DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def create_session(self, *, employee_id: int, clock_in: datetime) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    "INSERT INTO attendance_sessions(employee_id, clock_in, status) VALUES(%s,%s,%s)",
                    (int(employee_id), clock_in, SessionStatus.ACTIVE.value),
                )
            except mysql.connector.IntegrityError as err:
                if is_duplicate_key(err):
                    return None
                raise
            return AttendanceSession(
                session_id=int(cur.lastrowid),
                employee_id=int(employee_id),
                clock_in=clock_in,
                clock_out=None,
                status=SessionStatus.ACTIVE,
            )

    def close_session(self, *, session_id: int, clock_out: datetime, total_hours: float) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE attendance_sessions
                    SET clock_out=%s, total_hours=%s, status=%s
                    WHERE session_id=%s AND status=%s
                    """,
                    (clock_out, total_hours, SessionStatus.COMPLETED.value, int(session_id), SessionStatus.ACTIVE.value),
                )
                if cur.rowcount == 0:
                    raise GuardRejected()
                cur.execute(
                    "UPDATE attendance_breaks SET break_end=%s WHERE session_id=%s AND break_end IS NULL",
                    (clock_out, int(session_id)),
                )
        except GuardRejected:
            return False
        return True

    def mark_corrected(
        self,
        *,
        session_id: int,
        clock_in: datetime,
        clock_out: datetime,
        total_hours: float,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET clock_in=%s, clock_out=%s, total_hours=%s, status=%s, note=%s
                WHERE session_id=%s AND status<>%s
                """,
                (
                    clock_in,
                    clock_out,
                    total_hours,
                    SessionStatus.CORRECTED.value,
                    note,
                    int(session_id),
                    SessionStatus.ACTIVE.value,
                ),
            )
            return cur.rowcount > 0

    def list_between(
        self,
        *,
        start: datetime,
        end: Optional[datetime] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceSession]:
        clauses = ["clock_in >= %s"]
        params: list[object] = [start]

        if end is not None:
            clauses.append("clock_in <= %s")
            params.append(end)
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE {where}
                ORDER BY clock_in DESC, session_id DESC
                """,
                tuple(params),
            )
            return [_to_session(r) for r in fetchall(cur)]
