from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..core.constants import ALL_PERSONS_GROUP_ID, FIRST_METHODOLOGY_GROUP_ID, FIRST_USER_GROUP_ID
from ..core.enums import Methodology, Presence, RankLevel
from ..database.connection import DatabaseConnection
from ..database.sql_base import db_cursor, fetchone
from .model import Person
from .repository import PersonRepository

logger = logging.getLogger(__name__)


def row_to_person(row: Dict[str, Any]) -> Person:
    """Build a Person from a store row, tolerating unknown enum codes."""
    person_id = int(row["id"])
    try:
        rank = RankLevel(int(row["rank_level"]))
    except ValueError:
        logger.warning("Person %s has unknown rank %r, using NONE", person_id, row["rank_level"])
        rank = RankLevel.NONE
    try:
        methodology = Methodology(int(row["methodology"]))
    except ValueError:
        logger.warning("Person %s has unknown methodology %r, using CUB", person_id, row["methodology"])
        methodology = Methodology.CUB

    return Person(
        person_id=person_id,
        name=row["name"],
        surname=row["surname"],
        rank=rank,
        methodology=methodology,
        presence=Presence.IN if int(row.get("presence") or 0) else Presence.OUT,
    )


class SQLPersonRepository(PersonRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_person(
        self,
        *,
        name: str,
        surname: str,
        rank: RankLevel,
        methodology: Methodology,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO `Person`(`name`, `surname`, `rank_level`, `methodology`, `presence`)
                VALUES(%s, %s, %s, %s, %s)
                """,
                (name, surname, int(rank), int(methodology), int(Presence.OUT)),
            )
            person_id = cur.lastrowid
            cur.execute(
                "INSERT INTO `GroupMembers`(`group_id`, `person_id`) VALUES(%s, %s)",
                (ALL_PERSONS_GROUP_ID, person_id),
            )
            cur.execute(
                "INSERT INTO `GroupMembers`(`group_id`, `person_id`) VALUES(%s, %s)",
                (methodology.group_id, person_id),
            )
            return person_id

    def get_by_id(self, person_id: int) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT `id`, `name`, `surname`, `rank_level`, `methodology`, `presence`
                FROM `Person`
                WHERE `id`=%s
                """,
                (int(person_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return row_to_person(row)

    def update_person(
        self,
        *,
        person_id: int,
        name: str,
        surname: str,
        rank: RankLevel,
        methodology: Methodology,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT `methodology` FROM `Person` WHERE `id`=%s", (int(person_id),))
            row = fetchone(cur)
            if not row:
                return False

            cur.execute(
                """
                UPDATE `Person`
                SET `name`=%s, `surname`=%s, `rank_level`=%s, `methodology`=%s
                WHERE `id`=%s
                """,
                (name, surname, int(rank), int(methodology), int(person_id)),
            )

            # Keep the materialized methodology membership in step with the attribute.
            if int(row["methodology"]) != int(methodology):
                cur.execute(
                    "DELETE FROM `GroupMembers` WHERE `person_id`=%s AND `group_id` BETWEEN %s AND %s",
                    (int(person_id), FIRST_METHODOLOGY_GROUP_ID, FIRST_USER_GROUP_ID - 1),
                )
                cur.execute(
                    "INSERT INTO `GroupMembers`(`group_id`, `person_id`) VALUES(%s, %s)",
                    (methodology.group_id, int(person_id)),
                )
            return True

    def delete_person(self, person_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM `GroupMembers` WHERE `person_id`=%s", (int(person_id),))
            cur.execute("DELETE FROM `Person` WHERE `id`=%s", (int(person_id),))
            return cur.rowcount > 0
