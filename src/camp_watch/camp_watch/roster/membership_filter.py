from __future__ import annotations

from typing import AbstractSet, Iterable, List

from ..groups.model import GroupWithMembers
from ..persons.model import Person


def persons_not_in(persons: Iterable[Person], member_ids: AbstractSet[int]) -> List[Person]:
    return [p for p in persons if p.person_id not in member_ids]


def filter_persons_excluding_group(persons: Iterable[Person], group: GroupWithMembers) -> List[Person]:
    """Persons from ``persons`` who are not yet members of ``group`` (roster order kept)."""
    return persons_not_in(persons, group.member_ids)
