from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from ..common.datetime_utils import format_db_timestamp, parse_db_timestamp
from ..core.enums import Presence
from ..database.connection import DatabaseConnection
from ..database.sql_base import db_cursor, fetchall, fetchone
from .model import PresenceEvent
from .repository import PresenceRepository

logger = logging.getLogger(__name__)


class SQLPresenceRepository(PresenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def set_presence(self, *, person_id: int, presence: Presence, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT `id` FROM `Person` WHERE `id`=%s", (int(person_id),))
            if fetchone(cur) is None:
                return False
            cur.execute(
                "UPDATE `Person` SET `presence`=%s WHERE `id`=%s",
                (int(presence), int(person_id)),
            )
            cur.execute(
                "INSERT INTO `PresenceLog`(`subject_id`, `presence`, `timestamp`) VALUES(%s, %s, %s)",
                (int(person_id), int(presence), format_db_timestamp(at)),
            )
            return True

    def load_presence_log(self) -> Sequence[PresenceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT `id`, `subject_id`, `presence`, `timestamp`
                FROM `PresenceLog`
                ORDER BY `id` ASC
                """
            )
            rows = fetchall(cur)

        events = []
        for r in rows:
            try:
                timestamp = parse_db_timestamp(r["timestamp"])
            except (TypeError, ValueError):
                logger.warning("Skipping presence log row %s with unreadable timestamp %r", r["id"], r["timestamp"])
                continue
            events.append(
                PresenceEvent(
                    event_id=int(r["id"]),
                    subject_id=int(r["subject_id"]),
                    presence=Presence.IN if int(r["presence"]) else Presence.OUT,
                    timestamp=timestamp,
                )
            )
        return events
