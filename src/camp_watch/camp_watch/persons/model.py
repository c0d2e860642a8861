from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Methodology, Presence, RankLevel


@dataclass(frozen=True)
class Person:
    """Domain entity: a camp member.

    Note: plain data object, read-only snapshot of a store row.
    """

    person_id: int
    name: str
    surname: str
    rank: RankLevel
    methodology: Methodology
    presence: Presence = Presence.OUT

    @property
    def is_inside(self) -> bool:
        return self.presence is Presence.IN

    def to_dict(self) -> dict:
        return {
            "id": self.person_id,
            "name": self.name,
            "surname": self.surname,
            "rank": int(self.rank),
            "rank_label": self.rank.label,
            "methodology": int(self.methodology),
            "methodology_label": self.methodology.label,
            "colour": self.methodology.colour,
            "inside": self.is_inside,
        }
