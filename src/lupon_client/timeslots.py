"""Session time-slot helpers.

Hearings run in fixed one-hour slots with a lunch gap at noon. The backend
reports booked times in both 24-hour (``"13:00"``) and 12-hour
(``"1:00 PM"``) form, so everything here accepts either.
"""

from __future__ import annotations

import re
from datetime import datetime, time

SESSION_SLOTS: tuple[str, ...] = (
    "08:00",
    "09:00",
    "10:00",
    "11:00",
    "13:00",
    "14:00",
    "15:00",
    "16:00",
    "17:00",
    "18:00",
)

_TWELVE_HOUR = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")
_TWENTY_FOUR_HOUR = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")


def parse_time(value: str) -> time:
    """
    Parse a slot time in any representation the backend emits.

    Accepts ``HH:MM``, ``HH:MM:SS`` and ``H:MM AM/PM``.

    Raises:
        ValueError: If the value is empty or not a recognised time.
    """
    if not value or not value.strip():
        raise ValueError("time value is empty")

    match = _TWELVE_HOUR.match(value)
    if match:
        return datetime.strptime(
            f"{int(match.group(1))}:{match.group(2)} {match.group(3).upper()}", "%I:%M %p"
        ).time()

    match = _TWENTY_FOUR_HOUR.match(value)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        seconds = int(match.group(3) or 0)
        return time(hours, minutes, seconds)

    raise ValueError(f"unrecognised time: {value!r}")


def normalize_time(value: str) -> str:
    """Return ``value`` as zero-padded ``HH:MM``."""
    parsed = parse_time(value)
    return f"{parsed.hour:02d}:{parsed.minute:02d}"


def time_to_minutes(value: str) -> int:
    """Minutes since midnight for any accepted time representation."""
    parsed = parse_time(value)
    return parsed.hour * 60 + parsed.minute


def to_12_hour(time24: str) -> str:
    """
    Convert ``HH:MM`` to the backend's display form.

    ``"08:00"`` becomes ``"8:00 AM"``, ``"12:00"`` becomes ``"12:00 PM"``
    and ``"00:30"`` becomes ``"12:30 AM"``.
    """
    parsed = parse_time(time24)
    suffix = "PM" if parsed.hour >= 12 else "AM"
    display_hour = parsed.hour % 12 or 12
    return f"{display_hour}:{parsed.minute:02d} {suffix}"


def to_24_hour(time12: str) -> str:
    """Convert ``H:MM AM/PM`` (or an already 24-hour value) to ``HH:MM``."""
    return normalize_time(time12)


def same_slot(first: str, second: str) -> bool:
    """True when two time strings name the same minute of the day."""
    try:
        return time_to_minutes(first) == time_to_minutes(second)
    except ValueError:
        return False


def minutes_between(first: str, second: str) -> int:
    return abs(time_to_minutes(first) - time_to_minutes(second))
