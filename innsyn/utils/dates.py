"""Lenient date parsing and Norwegian display formatting for store values."""

from datetime import date, datetime, timezone
from typing import Optional, Union

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

DateLike = Union[str, date, datetime, None]


def parse_date(value: DateLike) -> Optional[datetime]:
    """
    Parse a store date value into an aware datetime.

    Accepts ``YYYY-MM-DD`` strings, ISO-8601 timestamps (a trailing ``Z`` is
    accepted), ``date`` and ``datetime`` objects. Anything else, including
    empty strings, yields ``None``.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def timestamp_or_epoch(value: DateLike) -> float:
    """POSIX timestamp of ``value``; missing or invalid dates count as epoch zero."""
    parsed = parse_date(value)
    if parsed is None:
        return EPOCH.timestamp()
    return parsed.timestamp()


def format_date_human(value: DateLike, missing: str = "—") -> str:
    """Format as ``dd.mm.yyyy``; unparseable input is returned as-is."""
    if value is None or value == "":
        return missing
    parsed = parse_date(value)
    if parsed is None:
        return str(value)
    return parsed.strftime("%d.%m.%Y")


def format_datetime_human(value: DateLike, missing: str = "—") -> str:
    """Format as ``dd.mm.yyyy HH:MM``."""
    parsed = parse_date(value)
    if parsed is None:
        return missing
    return parsed.strftime("%d.%m.%Y %H:%M")
