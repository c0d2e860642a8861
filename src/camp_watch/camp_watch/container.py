from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Optional

from .database.connection import DBConfig, DatabaseConnection
from .groups.sql_group_repository import SQLGroupRepository
from .persons.sql_person_repository import SQLPersonRepository
from .presence.sql_presence_repository import SQLPresenceRepository
from .roster.service import RosterService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    persons_repo: SQLPersonRepository
    groups_repo: SQLGroupRepository
    presence_repo: SQLPresenceRepository

    roster_service: RosterService


def build_container(*, db_config: dict, tz: Optional[tzinfo] = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    persons_repo = SQLPersonRepository(conn)
    groups_repo = SQLGroupRepository(conn)
    presence_repo = SQLPresenceRepository(conn)

    roster_service = RosterService(persons_repo, groups_repo, presence_repo, tz=tz)

    return Container(
        conn=conn,
        persons_repo=persons_repo,
        groups_repo=groups_repo,
        presence_repo=presence_repo,
        roster_service=roster_service,
    )
