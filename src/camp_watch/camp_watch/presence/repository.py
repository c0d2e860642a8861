from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from ..core.enums import Presence
from .model import PresenceEvent


class PresenceRepository(Protocol):
    def set_presence(self, *, person_id: int, presence: Presence, at: datetime) -> bool:
        """Update the person's flag and append one log row, as one write.

        Returns False (and writes nothing) when the person does not exist.
        """

        raise NotImplementedError

    def load_presence_log(self) -> Sequence[PresenceEvent]:
        """All events, ordered by id ascending."""

        raise NotImplementedError
