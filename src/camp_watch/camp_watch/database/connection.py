from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import mysql.connector

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

SQLITE = "sqlite"
MYSQL = "mysql"


@dataclass
class DBConfig:
    engine: str = SQLITE
    path: str = ""
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = "camp_watch"

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        engine = str(db_config.get("engine", SQLITE)).lower()
        if engine not in {SQLITE, MYSQL}:
            raise ValidationError(f"Unsupported database engine: {engine}")
        return cls(
            engine=engine,
            path=str(db_config.get("path", "")),
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "camp_watch")),
        )

    def describe(self) -> str:
        if self.engine == SQLITE:
            return f"sqlite:{self.path}"
        return f"mysql:{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """DB connection factory.

    SQLite: one connection owned for the process lifetime (single local writer).
    MySQL: short-lived connections per operation.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._sqlite_conn: Optional[sqlite3.Connection] = None

    @property
    def config(self) -> DBConfig:
        return self._config

    @property
    def engine(self) -> str:
        return self._config.engine

    def connect(self) -> Any:
        if self.engine == SQLITE:
            if self._sqlite_conn is None:
                self._sqlite_conn = self._open_sqlite()
            return self._sqlite_conn

        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
        )

    def release(self, conn: Any) -> None:
        """Give back a connection obtained from :meth:`connect`."""
        if conn is not self._sqlite_conn:
            conn.close()

    def close(self) -> None:
        if self._sqlite_conn is not None:
            self._sqlite_conn.close()
            self._sqlite_conn = None

    def _open_sqlite(self) -> sqlite3.Connection:
        path = self._config.path or ":memory:"
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Opening SQLite database at %s", path)
        conn = sqlite3.connect(path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn
