"""
Typed views of the records the case-management backend returns.

The backend is loose about shapes (dates as plain days or ISO timestamps,
times with or without seconds, panels as JSON strings or arrays), so the
validators here normalise everything to ``YYYY-MM-DD`` / ``HH:MM`` strings.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .clock import DEFAULT_TIMEZONE, get_timezone
from .timeslots import normalize_time

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    MEDIATION = "mediation"
    CONCILIATION = "conciliation"
    ARBITRATION = "arbitration"

    @property
    def session_id_field(self) -> str:
        """Request body key naming the session for save/reschedule calls."""
        return f"{self.value}_id"

    @property
    def case_status(self) -> "CaseStatus":
        return CaseStatus(self.value.capitalize())


class CaseStatus(str, Enum):
    """Complaint statuses as stored by the backend (mixed case is intentional)."""

    PENDING = "pending"
    MEDIATION = "Mediation"
    CONCILIATION = "Conciliation"
    ARBITRATION = "Arbitration"
    SETTLED = "Settled"
    WITHDRAWN = "withdrawn"
    REFERRED = "referred"
    CFA = "cfa"


class LuponModel(BaseModel):
    """Base model: accept field names or aliases, ignore unknown keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def date_only(value: object) -> object:
    """Reduce a backend date or timestamp to ``YYYY-MM-DD``.

    UTC timestamps (``2025-06-25T16:00:00.000Z``) are shifted to Philippine
    time first so the day matches what the hall sees.
    """
    if not isinstance(value, str):
        return value
    candidate = value.strip()
    if not candidate:
        return None
    if "T" not in candidate:
        return candidate[:10]
    try:
        parsed = datetime.fromisoformat(candidate.replace("Z", "+00:00"))
    except ValueError:
        return candidate[:10]
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(get_timezone(DEFAULT_TIMEZONE))
    return parsed.date().isoformat()


def hour_minute(value: object) -> object:
    if not isinstance(value, str):
        return value
    if not value.strip():
        return None
    try:
        return normalize_time(value)
    except ValueError:
        return value.strip()


def parse_panel(raw: Any) -> list[str]:
    """
    Parse a Lupon panel stored as a JSON string or an array.

    Malformed input yields an empty panel; blank names are dropped.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        if not raw.strip():
            return []
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Could not parse panel members: %r", raw[:80])
            return []
    if not isinstance(raw, list):
        logger.warning("Unexpected panel payload type: %s", type(raw).__name__)
        return []
    return [str(member).strip() for member in raw if member is not None and str(member).strip()]


def parse_documentation(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw] if raw.strip() else []
    return [str(item) for item in raw if item]


class Reschedule(LuponModel):
    id: Optional[int] = None
    reschedule_date: Optional[str] = None
    reschedule_time: Optional[str] = None
    reason: Optional[str] = None
    minutes: Optional[str] = None
    documentation: list[str] = Field(default_factory=list)
    created_at: Optional[str] = None

    @field_validator("reschedule_date", mode="before")
    @classmethod
    def _date(cls, v: object) -> object:
        return date_only(v)

    @field_validator("reschedule_time", mode="before")
    @classmethod
    def _time(cls, v: object) -> object:
        return hour_minute(v)

    @field_validator("documentation", mode="before")
    @classmethod
    def _documentation(cls, v: Any) -> list[str]:
        return parse_documentation(v)

    @property
    def has_minutes(self) -> bool:
        return bool(self.minutes and self.minutes.strip())


class Session(LuponModel):
    """A scheduled hearing for one stage of a case."""

    id: int
    complaint_id: Optional[int] = None
    stage: Optional[Stage] = None
    date: Optional[str] = None
    time: Optional[str] = None
    minutes: Optional[str] = None
    documentation: list[str] = Field(default_factory=list)
    reschedules: list[Reschedule] = Field(default_factory=list)
    panel: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("panel", "lupon_panel", "panel_members"),
    )
    case_title: Optional[str] = None
    complainant: Optional[str] = None
    respondent: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v: object) -> object:
        return date_only(v)

    @field_validator("time", mode="before")
    @classmethod
    def _time(cls, v: object) -> object:
        return hour_minute(v)

    @field_validator("panel", mode="before")
    @classmethod
    def _panel(cls, v: Any) -> list[str]:
        return parse_panel(v)

    @field_validator("documentation", mode="before")
    @classmethod
    def _documentation(cls, v: Any) -> list[str]:
        return parse_documentation(v)

    @property
    def scheduled_for(self) -> str:
        return f"{self.date or '?'} {self.time or '?'}"


class Case(LuponModel):
    """A complaint as listed by ``/api/complaints``."""

    id: int
    case_title: Optional[str] = None
    case_description: Optional[str] = None
    nature_of_case: Optional[str] = None
    relief_description: Optional[str] = None
    complainant: Optional[str] = None
    respondent: Optional[str] = None
    witness: Optional[str] = None
    date_filed: Optional[str] = None
    status: Optional[CaseStatus] = None
    priority: Optional[str] = None

    @field_validator("date_filed", mode="before")
    @classmethod
    def _date_filed(cls, v: object) -> object:
        return date_only(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: object) -> object:
        if isinstance(v, str):
            for status in CaseStatus:
                if status.value.lower() == v.strip().lower():
                    return status
        return v


class SlotAvailability(LuponModel):
    """Day occupancy reported by ``/api/*/available-slots/:date``."""

    available_slots: int = Field(default=0, alias="availableSlots")
    used_slots: int = Field(default=0, alias="usedSlots")
    max_slots_per_day: int = Field(default=4, alias="maxSlotsPerDay")
    scheduled_times: list[str] = Field(default_factory=list, alias="scheduledTimes")
    booked_times: list[str] = Field(default_factory=list, alias="bookedTimes")
    # None when the backend omits the flag; the validator then counts bookings.
    is_full: Optional[bool] = Field(default=None, alias="isFull")

    @classmethod
    def from_response(cls, payload: dict[str, Any]) -> "SlotAvailability":
        data = payload.get("data", payload) if isinstance(payload, dict) else {}
        return cls.model_validate(data or {})

    @property
    def all_booked(self) -> list[str]:
        """Booked times in both representations the backend reports."""
        return [*self.booked_times, *self.scheduled_times]


class Settlement(LuponModel):
    id: Optional[int] = None
    complaint_id: int
    settlement_type: Stage
    settlement_date: str
    agreements: str
    remarks: Optional[str] = None
    case_title: Optional[str] = None
    complainants: list[str] = Field(default_factory=list)
    respondents: list[str] = Field(default_factory=list)

    @field_validator("settlement_date", mode="before")
    @classmethod
    def _settlement_date(cls, v: object) -> object:
        return date_only(v)


class Notification(LuponModel):
    id: int
    user_id: Optional[int] = None
    complaint_id: Optional[int] = None
    referral_id: Optional[int] = None
    type: str
    title: str
    message: str = ""
    is_read: bool = False
    created_at: Optional[str] = None
    complaint_title: Optional[str] = None
    referral_title: Optional[str] = None


class User(LuponModel):
    id: int
    email: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    middle_name: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return self.role in {"admin", "secretary"}
