from __future__ import annotations

from typing import Iterable, List, Tuple

from ..persons.model import Person


def person_sort_key(person: Person) -> Tuple[int, str, str]:
    """Methodology order first, then surname, then name (case-insensitive)."""
    return (int(person.methodology), person.surname.casefold(), person.name.casefold())


def sort_persons(persons: Iterable[Person]) -> List[Person]:
    # sorted() is stable: full ties keep their incoming order
    return sorted(persons, key=person_sort_key)
