from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Tuple

from ..core.constants import DAY_LABEL_FORMAT, ENTRY_TIME_FORMAT
from ..core.enums import Presence


@dataclass(frozen=True)
class PresenceEvent:
    """Append-only audit row: a person went in or out. ``timestamp`` is aware UTC."""

    event_id: int
    subject_id: int
    presence: Presence
    timestamp: datetime


@dataclass(frozen=True)
class LogEntry:
    """Read-model for one displayed log line (local time)."""

    event_id: int
    subject_id: int
    name: str
    surname: str
    presence: Presence
    local_time: datetime

    @property
    def time_label(self) -> str:
        return self.local_time.strftime(ENTRY_TIME_FORMAT)

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "subject_id": self.subject_id,
            "name": self.name,
            "surname": self.surname,
            "direction": self.presence.name,
            "time": self.time_label,
        }


@dataclass(frozen=True)
class MinuteGroup:
    hour: int
    minute: int
    entries: Tuple[LogEntry, ...]

    @property
    def label(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def to_dict(self) -> dict:
        return {"minute": self.label, "entries": [e.to_dict() for e in self.entries]}


@dataclass(frozen=True)
class DayGroup:
    day: date
    minutes: Tuple[MinuteGroup, ...]

    @property
    def label(self) -> str:
        return self.day.strftime(DAY_LABEL_FORMAT)

    def to_dict(self) -> dict:
        return {"day": self.label, "minutes": [m.to_dict() for m in self.minutes]}
