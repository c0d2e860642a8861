from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import mysql.connector

from ..core.exceptions import StoreError
from .connection import SQLITE, DatabaseConnection

logger = logging.getLogger(__name__)

DRIVER_ERRORS = (sqlite3.Error, mysql.connector.Error)


class PortableCursor:
    """Cursor wrapper so repositories write one SQL dialect.

    Queries use ``%s`` placeholders (translated to ``?`` for SQLite) and
    backtick-quoted identifiers (accepted by both engines). Rows come back as dicts.
    """

    def __init__(self, raw, *, engine: str):
        self._raw = raw
        self._engine = engine

    def execute(self, sql: str, params: Sequence[Any] = ()) -> None:
        if self._engine == SQLITE:
            sql = sql.replace("%s", "?")
        self._raw.execute(sql, tuple(params))

    def fetchone(self) -> Optional[Dict[str, Any]]:
        row = self._raw.fetchone()
        return dict(row) if row else None

    def fetchall(self) -> List[Dict[str, Any]]:
        return [dict(r) for r in (self._raw.fetchall() or [])]

    @property
    def lastrowid(self) -> int:
        return int(self._raw.lastrowid)

    @property
    def rowcount(self) -> int:
        return int(self._raw.rowcount)

    def close(self) -> None:
        self._raw.close()


@contextmanager
def db_cursor(conn_factory: DatabaseConnection) -> Iterator[Tuple[Any, PortableCursor]]:
    """One transaction: commit on success, roll back and raise StoreError on failure."""
    try:
        conn = conn_factory.connect()
    except DRIVER_ERRORS as exc:
        raise StoreError(f"Cannot open database: {exc}") from exc

    try:
        if conn_factory.engine == SQLITE:
            raw = conn.cursor()
        else:
            raw = conn.cursor(dictionary=True)
        cur = PortableCursor(raw, engine=conn_factory.engine)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except DRIVER_ERRORS as exc:
        _rollback(conn)
        raise StoreError(f"Database operation failed: {exc}") from exc
    except Exception:
        _rollback(conn)
        raise
    finally:
        conn_factory.release(conn)


def _rollback(conn) -> None:
    try:
        conn.rollback()
    except DRIVER_ERRORS:
        logger.warning("Rollback failed", exc_info=True)


def fetchone(cur: PortableCursor) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur: PortableCursor) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
