from __future__ import annotations

import pytest

from camp_watch.database.bootstrap import apply_schema
from camp_watch.database.connection import DBConfig, DatabaseConnection


@pytest.fixture
def sqlite_conn():
    """A fresh in-memory SQLite store with the schema and reserved groups."""
    conn = DatabaseConnection(DBConfig(engine="sqlite", path=":memory:"))
    apply_schema(conn)
    yield conn
    conn.close()
