from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Group, GroupWithMembers


class GroupRepository(Protocol):
    def load_groups_with_members(self) -> Sequence[GroupWithMembers]:
        """All groups with resolved members. Order is not guaranteed."""

        raise NotImplementedError

    def get_by_id(self, group_id: int) -> Optional[Group]:
        raise NotImplementedError

    def insert_group(self, *, name: str) -> int:
        raise NotImplementedError

    def rename_group(self, *, group_id: int, name: str) -> bool:
        raise NotImplementedError

    def delete_group(self, group_id: int) -> bool:
        raise NotImplementedError

    def membership_exists(self, *, group_id: int, person_id: int) -> bool:
        raise NotImplementedError

    def insert_membership(self, *, group_id: int, person_id: int) -> None:
        raise NotImplementedError

    def delete_membership(self, *, group_id: int, person_id: int) -> bool:
        raise NotImplementedError
