from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Any, Optional

from ..core.constants import DB_TIMESTAMP_FORMAT


def now_utc() -> datetime:
    """Current UTC time, truncated to whole seconds.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(microsecond=0)


def format_db_timestamp(value: datetime) -> str:
    """Render an aware (or naive UTC) datetime as the stored UTC text."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(DB_TIMESTAMP_FORMAT)


def parse_db_timestamp(value: Any) -> datetime:
    """Normalize stored timestamps into aware UTC datetimes.

    SQLite returns the text column as ``str``; mysql-connector returns DATETIME
    columns as naive ``datetime``. Both hold UTC.
    """

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")

    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = datetime.strptime(text, DB_TIMESTAMP_FORMAT)
        except ValueError:
            parsed = datetime.fromisoformat(text)
        return parse_db_timestamp(parsed)

    raise TypeError(f"Unsupported timestamp value type: {type(value)!r}")


def to_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert an aware datetime to ``tz`` (system local zone when None)."""
    return value.astimezone(tz)
