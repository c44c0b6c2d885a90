"""Utility functions for handling timezone-aware datetimes."""

from datetime import date, datetime, timezone
from typing import Any, Optional


def utc_now() -> datetime:
    """
    Get the current UTC datetime with timezone awareness.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def ensure_timezone_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware.
    If naive, assumes it's UTC. None passes through.

    Args:
        dt: Datetime object (naive or aware)

    Returns:
        Timezone-aware datetime
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        # Assume naive datetime is UTC
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Best-effort conversion of an extracted or API value into an aware datetime.

    Accepts datetimes, dates, ISO-8601 strings (``Z`` suffix allowed) and the
    US ``MM/DD/YYYY`` form used on government forms. Anything else yields None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_timezone_aware(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return ensure_timezone_aware(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass

    for fmt in ("%m/%d/%Y", "%m/%d/%y", "%m/%d/%Y %H:%M", "%Y%m%d"):
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None
