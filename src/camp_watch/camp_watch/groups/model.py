from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Tuple

from ..core.constants import ALL_PERSONS_GROUP_ID, FIRST_USER_GROUP_ID
from ..persons.model import Person


def is_user_group_id(group_id: int) -> bool:
    return int(group_id) >= FIRST_USER_GROUP_ID


@dataclass(frozen=True)
class Group:
    """Domain entity: a named group of persons."""

    group_id: int
    name: str

    @property
    def is_all_persons(self) -> bool:
        return self.group_id == ALL_PERSONS_GROUP_ID

    @property
    def is_user_group(self) -> bool:
        return is_user_group_id(self.group_id)


@dataclass(frozen=True)
class GroupWithMembers(Group):
    """Group plus its resolved member list (store order unless sorted)."""

    members: Tuple[Person, ...] = field(default=())

    @property
    def member_ids(self) -> FrozenSet[int]:
        return frozenset(p.person_id for p in self.members)

    def to_dict(self) -> dict:
        return {
            "id": self.group_id,
            "name": self.name,
            "members": [p.to_dict() for p in self.members],
        }
