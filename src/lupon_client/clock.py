"""
Local clock helpers.

The barangay hall runs on Philippine time; "today" and "now" for the
scheduling rules are always taken in the configured timezone.
"""

from __future__ import annotations

from datetime import date, datetime

import pytz

from .timeslots import parse_time

DEFAULT_TIMEZONE = "Asia/Manila"


def get_timezone(name: str) -> pytz.BaseTzInfo:
    """
    Resolve a timezone name.

    Raises:
        pytz.UnknownTimeZoneError: If the name is not a known zone
    """
    return pytz.timezone(name)


def local_now(tz_name: str) -> datetime:
    """Current aware datetime in ``tz_name``."""
    return datetime.now(get_timezone(tz_name))


def local_today(tz_name: str) -> date:
    """Today's date in ``tz_name``."""
    return local_now(tz_name).date()


def parse_date(value: str) -> date:
    """
    Parse a ``YYYY-MM-DD`` date.

    Backend rows sometimes carry a full ISO timestamp; only the date part is
    used.
    """
    return date.fromisoformat(value.strip()[:10])


def combine_local(day: date | str, slot: str, tz_name: str) -> datetime:
    """Aware datetime for a calendar day and slot time in ``tz_name``."""
    if isinstance(day, str):
        day = parse_date(day)
    naive = datetime.combine(day, parse_time(slot).replace(second=0))
    return get_timezone(tz_name).localize(naive)


def as_local(moment: datetime, tz_name: str) -> datetime:
    """Convert ``moment`` into ``tz_name``; naive values are taken as already local."""
    tz = get_timezone(tz_name)
    if moment.tzinfo is None:
        return tz.localize(moment)
    return moment.astimezone(tz)
