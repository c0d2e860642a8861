from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import Methodology, RankLevel
from .model import Person


class PersonRepository(Protocol):
    """Repository interface for Person.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def insert_person(
        self,
        *,
        name: str,
        surname: str,
        rank: RankLevel,
        methodology: Methodology,
    ) -> int:
        """Insert the person and link it to the all-persons and methodology groups."""

        raise NotImplementedError

    def get_by_id(self, person_id: int) -> Optional[Person]:
        raise NotImplementedError

    def update_person(
        self,
        *,
        person_id: int,
        name: str,
        surname: str,
        rank: RankLevel,
        methodology: Methodology,
    ) -> bool:
        raise NotImplementedError

    def delete_person(self, person_id: int) -> bool:
        raise NotImplementedError
