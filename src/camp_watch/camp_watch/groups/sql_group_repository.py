from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.sql_base import db_cursor, fetchall, fetchone
from ..persons.sql_person_repository import row_to_person
from .model import Group, GroupWithMembers
from .repository import GroupRepository


class SQLGroupRepository(GroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def load_groups_with_members(self) -> Sequence[GroupWithMembers]:
        # Two queries (groups, then every membership joined with its person)
        # instead of one member query per group.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT `id`, `name` FROM `Group`")
            groups = fetchall(cur)

            cur.execute(
                """
                SELECT gm.`group_id`, p.`id`, p.`name`, p.`surname`, p.`rank_level`, p.`methodology`, p.`presence`
                FROM `GroupMembers` gm
                JOIN `Person` p ON gm.`person_id` = p.`id`
                """
            )
            member_rows = fetchall(cur)

        members: dict[int, list] = {int(g["id"]): [] for g in groups}
        for r in member_rows:
            bucket = members.get(int(r["group_id"]))
            if bucket is not None:
                bucket.append(row_to_person(r))

        return [
            GroupWithMembers(group_id=int(g["id"]), name=g["name"], members=tuple(members[int(g["id"])]))
            for g in groups
        ]

    def get_by_id(self, group_id: int) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT `id`, `name` FROM `Group` WHERE `id`=%s", (int(group_id),))
            row = fetchone(cur)
            if not row:
                return None
            return Group(group_id=int(row["id"]), name=row["name"])

    def insert_group(self, *, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO `Group`(`name`) VALUES(%s)", (name,))
            return cur.lastrowid

    def rename_group(self, *, group_id: int, name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT `id` FROM `Group` WHERE `id`=%s", (int(group_id),))
            if fetchone(cur) is None:
                return False
            cur.execute("UPDATE `Group` SET `name`=%s WHERE `id`=%s", (name, int(group_id)))
            return True

    def delete_group(self, group_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM `GroupMembers` WHERE `group_id`=%s", (int(group_id),))
            cur.execute("DELETE FROM `Group` WHERE `id`=%s", (int(group_id),))
            return cur.rowcount > 0

    def membership_exists(self, *, group_id: int, person_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM `GroupMembers` WHERE `group_id`=%s AND `person_id`=%s LIMIT 1",
                (int(group_id), int(person_id)),
            )
            return fetchone(cur) is not None

    def insert_membership(self, *, group_id: int, person_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO `GroupMembers`(`group_id`, `person_id`) VALUES(%s, %s)",
                (int(group_id), int(person_id)),
            )

    def delete_membership(self, *, group_id: int, person_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM `GroupMembers` WHERE `group_id`=%s AND `person_id`=%s",
                (int(group_id), int(person_id)),
            )
            return cur.rowcount > 0
