"""Group presence events into Day -> Minute -> entries for display.

The input must already be in ascending time order (the store appends strictly
forward in time and is read back by id). Out-of-order input is not re-sorted:
it produces additional, non-contiguous day/minute groups.
"""

from __future__ import annotations

from datetime import date, tzinfo
from typing import Iterable, List, Mapping, Optional, Tuple

from ..common.datetime_utils import to_local
from ..persons.model import Person
from .model import DayGroup, LogEntry, MinuteGroup, PresenceEvent


def aggregate_log(
    events: Iterable[PresenceEvent],
    persons: Mapping[int, Person],
    *,
    tz: Optional[tzinfo] = None,
) -> Tuple[DayGroup, ...]:
    """Single forward pass with an open day and an open minute accumulator.

    Events whose subject is missing from ``persons`` are dropped. Grouping keys and
    entry times use ``tz`` (system local zone when None).
    """

    days: List[DayGroup] = []
    minutes: List[MinuteGroup] = []
    entries: List[LogEntry] = []
    open_day: Optional[date] = None
    open_minute: Optional[Tuple[int, int]] = None

    def close_minute() -> None:
        nonlocal entries, open_minute
        if entries and open_minute is not None:
            minutes.append(MinuteGroup(hour=open_minute[0], minute=open_minute[1], entries=tuple(entries)))
        entries = []
        open_minute = None

    def close_day() -> None:
        nonlocal minutes, open_day
        close_minute()
        if minutes and open_day is not None:
            days.append(DayGroup(day=open_day, minutes=tuple(minutes)))
        minutes = []
        open_day = None

    for event in events:
        person = persons.get(event.subject_id)
        if person is None:
            continue

        local_time = to_local(event.timestamp, tz)
        day_key = local_time.date()
        minute_key = (local_time.hour, local_time.minute)

        if day_key != open_day:
            close_day()
            open_day = day_key
        if minute_key != open_minute:
            close_minute()
            open_minute = minute_key

        entries.append(
            LogEntry(
                event_id=event.event_id,
                subject_id=event.subject_id,
                name=person.name,
                surname=person.surname,
                presence=event.presence,
                local_time=local_time,
            )
        )

    close_day()
    return tuple(days)
