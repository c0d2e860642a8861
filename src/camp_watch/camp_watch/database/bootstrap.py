from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

import mysql.connector

from ..core.constants import ALL_PERSONS_GROUP_ID, ALL_PERSONS_GROUP_NAME
from ..core.enums import Methodology
from ..core.exceptions import StoreError
from .connection import MYSQL, SQLITE, DatabaseConnection
from .sql_base import db_cursor, fetchall, fetchone

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).resolve().parent
SCHEMA_FILES = {
    SQLITE: SCHEMA_DIR / "schema_sqlite.sql",
    MYSQL: SCHEMA_DIR / "schema_mysql.sql",
}


def default_groups() -> list[tuple[int, str]]:
    """Reserved groups seeded on first initialization, in id order."""
    groups = [(ALL_PERSONS_GROUP_ID, ALL_PERSONS_GROUP_NAME)]
    groups.extend((m.group_id, m.label) for m in Methodology)
    return groups


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False

    for ch in sql:
        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    """MySQL only: create the configured database if it is missing."""
    config = conn_factory.config
    try:
        conn = mysql.connector.connect(
            host=config.host,
            port=int(config.port),
            user=config.user,
            password=config.password,
        )
    except mysql.connector.Error as exc:
        raise StoreError(f"Cannot reach MySQL server: {exc}") from exc
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: Optional[Path] = None) -> None:
    """Create missing tables and seed the reserved groups. Idempotent."""
    if conn_factory.engine == MYSQL:
        ensure_database_exists(conn_factory)

    schema_path = Path(schema_path or SCHEMA_FILES[conn_factory.engine])
    sql = schema_path.read_text(encoding="utf-8")

    with db_cursor(conn_factory) as (_, cur):
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)

    seed_default_groups(conn_factory)
    logger.info("Schema ready on %s", conn_factory.config.describe())


def seed_default_groups(conn_factory: DatabaseConnection) -> bool:
    """Insert groups 1..5 when the Group table is empty. Returns True when seeded."""
    with db_cursor(conn_factory) as (_, cur):
        cur.execute("SELECT COUNT(`id`) AS n FROM `Group`")
        row = fetchone(cur)
        if row and int(row["n"]) > 0:
            return False

        for group_id, name in default_groups():
            cur.execute("INSERT INTO `Group`(`id`, `name`) VALUES(%s, %s)", (group_id, name))

    logger.info("Seeded reserved groups")
    return True


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    with db_cursor(conn_factory) as (_, cur):
        if conn_factory.engine == SQLITE:
            cur.execute("SELECT `name` FROM sqlite_master WHERE `type`='table' AND `name` NOT LIKE 'sqlite_%' ORDER BY `name`")
        else:
            cur.execute(
                "SELECT TABLE_NAME AS name FROM information_schema.TABLES WHERE TABLE_SCHEMA=%s ORDER BY TABLE_NAME",
                (conn_factory.config.database,),
            )
        return [str(r["name"]) for r in fetchall(cur)]
