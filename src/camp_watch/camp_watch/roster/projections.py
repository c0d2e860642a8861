from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..groups.model import GroupWithMembers
from ..persons.model import Person
from ..presence.model import DayGroup


@dataclass(frozen=True)
class PresencePartition:
    """Persons on one side of the gate plus parallel selection markers."""

    persons: Tuple[Person, ...] = ()
    selected: Tuple[bool, ...] = ()

    def to_dict(self) -> dict:
        return {
            "persons": [p.to_dict() for p in self.persons],
            "selected": list(self.selected),
        }


@dataclass(frozen=True)
class Projections:
    """Everything the presentation layer displays, published as one snapshot."""

    roster: Tuple[Person, ...] = ()
    groups: Tuple[GroupWithMembers, ...] = ()
    user_groups: Tuple[GroupWithMembers, ...] = ()
    user_group_names: Tuple[str, ...] = ()
    outside: PresencePartition = PresencePartition()
    inside: PresencePartition = PresencePartition()
    active_group_index: int = 0
    picker: Tuple[Person, ...] = ()
    log: Tuple[DayGroup, ...] = ()

    def to_dict(self) -> dict:
        return {
            "roster": [p.to_dict() for p in self.roster],
            "groups": [g.to_dict() for g in self.groups],
            "user_groups": [g.to_dict() for g in self.user_groups],
            "user_group_names": list(self.user_group_names),
            "outside": self.outside.to_dict(),
            "inside": self.inside.to_dict(),
            "active_group_index": self.active_group_index,
            "picker": [p.to_dict() for p in self.picker],
            "log": [d.to_dict() for d in self.log],
        }
