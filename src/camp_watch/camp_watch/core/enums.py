from __future__ import annotations

from enum import IntEnum

from .constants import FIRST_METHODOLOGY_GROUP_ID


class Methodology(IntEnum):
    """Age section of a person. The integer value fixes the display order."""

    CUB = 0
    SCOUT = 1
    VENTURE_SCOUT = 2
    ROVER = 3

    @property
    def group_id(self) -> int:
        return FIRST_METHODOLOGY_GROUP_ID + int(self)

    @property
    def label(self) -> str:
        return _METHODOLOGY_LABELS[self]

    @property
    def colour(self) -> str:
        return _METHODOLOGY_COLOURS[self]


_METHODOLOGY_LABELS = {
    Methodology.CUB: "Cub",
    Methodology.SCOUT: "Scout",
    Methodology.VENTURE_SCOUT: "Venture Scout",
    Methodology.ROVER: "Rover",
}

_METHODOLOGY_COLOURS = {
    Methodology.CUB: "#FFBD59",
    Methodology.SCOUT: "#AFCB07",
    Methodology.VENTURE_SCOUT: "#124093",
    Methodology.ROVER: "#E30613",
}


class RankLevel(IntEnum):
    """Rank tiers; the first four tiers are split by gender."""

    NONE = 0
    FIRST_MALE = 1
    FIRST_FEMALE = 2
    SECOND_MALE = 3
    SECOND_FEMALE = 4
    THIRD_MALE = 5
    THIRD_FEMALE = 6
    FOURTH_MALE = 7
    FOURTH_FEMALE = 8
    FIFTH = 9
    SIXTH = 10

    @property
    def label(self) -> str:
        """Translation key used by the presentation layer (empty for no rank)."""
        if self is RankLevel.NONE:
            return ""
        return f"RANK_{self.name}"


class Presence(IntEnum):
    """Whether a person is currently inside the camp."""

    OUT = 0
    IN = 1
