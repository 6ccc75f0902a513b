"""
Display Formatters.

Plain-text renderings of dates, times, relative ages, and status values
shared by every screen.  All date helpers accept ISO-8601 strings as
returned by the backend and answer ``"N/A"`` for empty input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

__all__ = [
    "format_date",
    "format_date_short",
    "format_datetime",
    "format_time",
    "status_label",
    "time_ago",
]

_NOT_AVAILABLE = "N/A"

# Largest unit first; months and years are the usual 30/365-day approximations.
_TIME_AGO_INTERVALS: tuple[tuple[str, int], ...] = (
    ("year", 31_536_000),
    ("month", 2_592_000),
    ("week", 604_800),
    ("day", 86_400),
    ("hour", 3_600),
    ("minute", 60),
)


def _parse_iso(value: str) -> datetime:
    # Python < 3.11 rejects a trailing "Z".
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _hour_12(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def format_date(value: Optional[str]) -> str:
    """``"2024-01-01T10:00:00Z"`` -> ``"January 1, 2024"``."""
    if not value:
        return _NOT_AVAILABLE
    moment = _parse_iso(value)
    return f"{moment:%B} {moment.day}, {moment.year}"


def format_time(value: Optional[str]) -> str:
    """``"14:30:00"`` -> ``"2:30 PM"``."""
    if not value:
        return _NOT_AVAILABLE
    return _hour_12(_parse_iso(f"2000-01-01T{value}"))


def format_datetime(value: Optional[str]) -> str:
    """``"2024-01-01T14:30:00"`` -> ``"January 1, 2024, 2:30 PM"``."""
    if not value:
        return _NOT_AVAILABLE
    moment = _parse_iso(value)
    return f"{format_date(value)}, {_hour_12(moment)}"


def format_date_short(value: Optional[str]) -> str:
    """``"2024-01-01"`` -> ``"01/01/2024"`` (US month/day/year)."""
    if not value:
        return _NOT_AVAILABLE
    moment = _parse_iso(value)
    return f"{moment.month:02d}/{moment.day:02d}/{moment.year}"


def time_ago(value: str, now: Optional[datetime] = None) -> str:
    """Relative age such as ``"Just now"`` or ``"3 hours ago"``.

    Naive timestamps are treated as UTC.
    """
    moment = _parse_iso(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    reference = now or datetime.now(timezone.utc)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)

    seconds = int((reference - moment).total_seconds())
    if seconds < 60:
        return "Just now"

    for unit, unit_seconds in _TIME_AGO_INTERVALS:
        count = seconds // unit_seconds
        if count >= 1:
            return f"{count} {unit}{'' if count == 1 else 's'} ago"

    return "Just now"


def status_label(status: str) -> str:
    """``"PENDING"`` / ``"pending"`` -> ``"Pending"``."""
    return status[:1].upper() + status[1:].lower()
