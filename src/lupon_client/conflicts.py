"""
Advisory slot-conflict checks for hearing schedules.

Mirrors what the backend enforces so a bad pick can be rejected before the
request is sent. The backend remains the authority; a passing decision here
does not guarantee the booking will be accepted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable

from .calendar_grid import is_weekend
from .clock import parse_date
from .errors import SlotConflictError
from .timeslots import SESSION_SLOTS, minutes_between, normalize_time, parse_time, same_slot

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 4
DEFAULT_MIN_GAP_MINUTES = 60


class SlotRejection(str, Enum):
    MISSING_INPUT = "missing_input"
    DATE_UNAVAILABLE = "date_unavailable"
    IN_PAST = "in_past"
    ALREADY_BOOKED = "already_booked"
    DAY_FULL = "day_full"
    TOO_CLOSE = "too_close"


REJECTION_MESSAGES: dict[SlotRejection, str] = {
    SlotRejection.MISSING_INPUT: "Please select both date and time.",
    SlotRejection.DATE_UNAVAILABLE: (
        "Sessions can only be scheduled on weekdays from today onward. "
        "Please select a different date."
    ),
    SlotRejection.IN_PAST: "Cannot schedule sessions in the past. Please select a future time.",
    SlotRejection.ALREADY_BOOKED: "This time slot is already booked. Please select a different time.",
    SlotRejection.DAY_FULL: (
        "No available slots for this date. Maximum {capacity} sessions per day allowed."
    ),
    SlotRejection.TOO_CLOSE: (
        "Minimum {gap_hours}-hour interval required between sessions. "
        "Please select a different time."
    ),
}


@dataclass(frozen=True)
class SlotDecision:
    accepted: bool
    reason: SlotRejection | None = None
    message: str = ""
    conflicting_time: str | None = None
    details: dict = field(default_factory=dict)

    def raise_for_rejection(self) -> None:
        if self.accepted or self.reason is None:
            return
        raise SlotConflictError(
            self.message,
            code=self.reason.value.upper(),
            details={"conflicting_time": self.conflicting_time, **self.details},
        )


class ConflictValidator:
    """Decides whether a candidate hearing time can be booked on a day."""

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        min_gap_minutes: int = DEFAULT_MIN_GAP_MINUTES,
        slots: Iterable[str] = SESSION_SLOTS,
    ) -> None:
        self.capacity = capacity
        self.min_gap_minutes = min_gap_minutes
        self.slots = tuple(slots)

    def check(
        self,
        date_str: str | None,
        time_str: str | None,
        booked_times: Iterable[str],
        *,
        own_slot: str | None = None,
        is_full: bool | None = None,
        now: datetime | None = None,
    ) -> SlotDecision:
        """
        Run the checks in order; the first failure wins.

        Args:
            date_str: Candidate day (``YYYY-MM-DD``)
            time_str: Candidate time, 24h or 12h
            booked_times: Times already booked on that day, in either form
            own_slot: The session's current time when rescheduling on the same day
            is_full: The backend's ``isFull`` flag, when known
            now: Local current datetime; enables the past-date and past-slot checks

        Returns:
            SlotDecision describing the outcome

        Raises:
            ValueError: If ``date_str`` or ``time_str`` cannot be parsed
        """
        if not date_str or not time_str:
            return self._reject(SlotRejection.MISSING_INPUT)

        candidate = normalize_time(time_str)
        day = parse_date(date_str)
        if is_weekend(day) or (now is not None and day < now.date()):
            return self._reject(SlotRejection.DATE_UNAVAILABLE)

        booked = _distinct_times(booked_times)

        if now is not None and _is_past_slot(date_str, candidate, now):
            return self._reject(SlotRejection.IN_PAST, conflicting_time=candidate)

        others = [t for t in booked if not (own_slot and same_slot(t, own_slot))]

        for booked_time in others:
            if booked_time == candidate:
                return self._reject(SlotRejection.ALREADY_BOOKED, conflicting_time=booked_time)

        day_full = is_full if is_full is not None else len(booked) >= self.capacity
        is_own = bool(own_slot) and same_slot(candidate, own_slot)
        if day_full and not is_own:
            return self._reject(SlotRejection.DAY_FULL, details={"used": len(booked)})

        for booked_time in others:
            if minutes_between(booked_time, candidate) < self.min_gap_minutes:
                return self._reject(SlotRejection.TOO_CLOSE, conflicting_time=booked_time)

        return SlotDecision(accepted=True)

    def available_times(
        self,
        date_str: str,
        booked_times: Iterable[str],
        *,
        own_slot: str | None = None,
        is_full: bool | None = None,
        now: datetime | None = None,
    ) -> list[str]:
        """The fixed slots that would pass :meth:`check` on ``date_str``."""
        booked = list(booked_times)
        return [
            slot
            for slot in self.slots
            if self.check(
                date_str, slot, booked, own_slot=own_slot, is_full=is_full, now=now
            ).accepted
        ]

    def _reject(
        self,
        reason: SlotRejection,
        *,
        conflicting_time: str | None = None,
        details: dict | None = None,
    ) -> SlotDecision:
        message = REJECTION_MESSAGES[reason].format(
            capacity=self.capacity,
            gap_hours=_format_hours(self.min_gap_minutes),
        )
        logger.debug("slot_rejected reason=%s conflicting=%s", reason.value, conflicting_time)
        return SlotDecision(
            accepted=False,
            reason=reason,
            message=message,
            conflicting_time=conflicting_time,
            details=details or {},
        )


def _distinct_times(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if not value:
            continue
        try:
            key = normalize_time(value)
        except ValueError:
            logger.warning("Ignoring unparseable booked time: %r", value)
            continue
        if key not in seen:
            seen.add(key)
            result.append(key)
    return result


def _is_past_slot(date_str: str, time_str: str, now: datetime) -> bool:
    if date_str.strip()[:10] != now.date().isoformat():
        return False
    slot = parse_time(time_str)
    slot_start = now.replace(hour=slot.hour, minute=slot.minute, second=0, microsecond=0)
    return slot_start <= now


def _format_hours(minutes: int) -> str:
    if minutes % 60 == 0:
        return str(minutes // 60)
    return f"{minutes / 60:g}"
