"""
Wall-clock time helpers for the scheduling engine.

Times are exchanged as zero-padded "HH:MM" strings and compared as minutes
since midnight. Everything here is confined to a single day: adding minutes
wraps around midnight instead of rolling to the next date.
"""

import re
from datetime import date, datetime, time
from typing import Union

from parlor_booking.core.exceptions import InvalidInputError

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

TimeLike = Union[str, time, int]


def parse_time(value: TimeLike) -> int:
    """Return minutes since midnight for an "HH:MM" string.

    ``datetime.time`` objects (as loaded from the database) and integers that
    are already minute offsets are accepted too.
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid time: {value!r}")
    if isinstance(value, int):
        if 0 <= value < MINUTES_PER_DAY:
            return value
        raise InvalidInputError(f"Invalid time: {value!r}")
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        raise InvalidInputError(f"Invalid time: {value!r}")

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise InvalidInputError(f"Invalid time '{value}'. Use HH:MM (24h)")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_time(minutes: int) -> str:
    """Format minutes since midnight as "HH:MM"."""
    minutes = minutes % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def to_time(value: TimeLike) -> time:
    """Convert an "HH:MM" value into ``datetime.time`` for persistence."""
    minutes = parse_time(value)
    return time(hour=minutes // 60, minute=minutes % 60)


def add_minutes(value: TimeLike, duration: int) -> str:
    """Add ``duration`` minutes to a wall-clock time, wrapping within the day."""
    return format_time(parse_time(value) + int(duration))


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """Half-open interval overlap: touching intervals do not overlap.

    Works on minute offsets or on zero-padded "HH:MM" strings alike.
    """
    return a_start < b_end and a_end > b_start


def parse_date(value: Union[str, date]) -> date:
    """Parse an ISO ``YYYY-MM-DD`` calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidInputError(f"Invalid date: {value!r}")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInputError(f"Invalid date '{value}'. Use YYYY-MM-DD")
