from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(dt_tz.utc)


def as_utc(dt: datetime | None) -> datetime | None:
    """
    Normalize a stored timestamp to an aware UTC datetime.

    Drivers without timezone support (SQLite) hand back naive values that are
    already UTC; aware values from other zones are converted.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=dt_tz.utc)
    return dt.astimezone(dt_tz.utc)
