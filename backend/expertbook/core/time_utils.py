"""
Wall-clock helpers for slot arithmetic.

All times are minutes from local midnight on a single wall clock; there is
no timezone handling. Dates are keyed by their local calendar fields.
"""

from datetime import date, datetime, timedelta
import re
from typing import Union

from .constants import MINUTES_PER_DAY, MINUTES_PER_HOUR
from .exceptions import InvalidTimeFormatException

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def to_minutes(clock: str) -> int:
    """
    Convert "HH:MM" (24-hour) to minutes from midnight.

    "24:00" is accepted as the end-of-day boundary so a window may close at
    midnight.
    """
    if not isinstance(clock, str):
        raise InvalidTimeFormatException(clock)
    match = _CLOCK_RE.match(clock.strip())
    if not match:
        raise InvalidTimeFormatException(clock)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes >= MINUTES_PER_HOUR:
        raise InvalidTimeFormatException(clock)
    total = hours * MINUTES_PER_HOUR + minutes
    if total > MINUTES_PER_DAY:
        raise InvalidTimeFormatException(clock)
    return total


def to_clock_string(minutes: int) -> str:
    """Convert minutes from midnight to "HH:MM"."""
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise InvalidTimeFormatException(minutes, expected="minute of day (0-1440)")
    if minutes < 0 or minutes > MINUTES_PER_DAY:
        raise InvalidTimeFormatException(minutes, expected="minute of day (0-1440)")
    return f"{minutes // MINUTES_PER_HOUR:02d}:{minutes % MINUTES_PER_HOUR:02d}"


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval intersection; zero-length intervals never overlap."""
    return max(a_start, b_start) < min(a_end, b_end)


def date_key(value: Union[date, datetime]) -> str:
    """Canonical YYYY-MM-DD key built from local calendar fields."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_date_key(value: str) -> date:
    """Parse a YYYY-MM-DD key back into a date."""
    if not isinstance(value, str) or not _DATE_KEY_RE.match(value):
        raise InvalidTimeFormatException(value, expected="YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidTimeFormatException(value, expected="YYYY-MM-DD")


def weekday_index(value: date) -> int:
    """Day of week with 0 = Sunday ... 6 = Saturday."""
    return (value.weekday() + 1) % 7


def slot_start(booking_date: date, start_min: int) -> datetime:
    """Naive local datetime at which a slot begins."""
    return datetime(booking_date.year, booking_date.month, booking_date.day) + timedelta(
        minutes=start_min
    )


def format_range(start_min: int, end_min: int) -> str:
    return f"{to_clock_string(start_min)}-{to_clock_string(end_min)}"
