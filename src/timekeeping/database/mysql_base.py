from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import PersistenceFailure
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


class GuardRejected(Exception):
    """Raised inside a transaction to roll it back when a conditional write misses."""


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on error.

    Driver errors surface as ``PersistenceFailure`` chained from the original.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as err:
        logger.error("Database connection failed: %s", err)
        raise PersistenceFailure(f"Database connection failed: {err}") from err

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as err:
        conn.rollback()
        logger.error("Database operation failed: %s", err)
        raise PersistenceFailure(f"Database operation failed: {err}") from err
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(err: mysql.connector.Error) -> bool:
    return getattr(err, "errno", None) == errorcode.ER_DUP_ENTRY
