"""Complaint filing: party checks, case numbering, the form payload and referrals."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from pydantic import Field, field_validator

from .errors import ValidationError
from .models import LuponModel, date_only

CASE_SEQUENCE_DIGITS = 3


class Party(LuponModel):
    """A complainant, respondent or witness; ``id`` set for existing residents."""

    id: Optional[int] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    middlename: Optional[str] = None
    name: Optional[str] = None
    purok: Optional[str] = None
    contact: Optional[str] = None
    barangay: Optional[str] = None

    @property
    def is_present(self) -> bool:
        return bool(self.id or self.name or self.firstname or self.lastname)

    @property
    def identity(self) -> str | None:
        """Key used to tell parties apart: resident id, else the normalised name."""
        if self.id:
            return f"id:{self.id}"
        parts = [self.lastname, self.firstname, self.middlename] if not self.name else [self.name]
        joined = " ".join(" ".join(p.split()).lower() for p in parts if p and p.strip())
        return f"name:{joined}" if joined else None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name.strip()
        last = (self.lastname or "").strip().upper()
        first = (self.firstname or "").strip().upper()
        middle = (self.middlename or "").strip().upper()
        if last and first:
            return f"{last}, {first}" + (f" {middle}" if middle else "")
        return last or first or (f"RESIDENT #{self.id}" if self.id else "")


_PAIRS = (
    ("complainant", "respondent", "Complainant and respondent cannot be the same person"),
    ("complainant", "witness", "Complainant and witness cannot be the same person"),
    ("respondent", "witness", "Respondent and witness cannot be the same person"),
)


def validate_parties(
    complainant: Party | None,
    respondent: Party | None,
    witness: Party | None = None,
) -> None:
    """
    Complainant, respondent and witness must be different people.

    Raises:
        ValidationError: Two of the present parties are the same person
    """
    parties = {"complainant": complainant, "respondent": respondent, "witness": witness}
    for first, second, message in _PAIRS:
        a, b = parties[first], parties[second]
        if a is None or b is None or not a.is_present or not b.is_present:
            continue
        if a.identity is not None and a.identity == b.identity:
            raise ValidationError(
                message, code="DUPLICATE_PARTY", details={"parties": [first, second]}
            )


def next_case_id(year: int, last_id: int | str | None = None) -> int:
    """
    Next year-prefixed case number.

    ``2025001`` is the first case of 2025; numbering restarts each year.
    """
    prefix = str(year)
    if last_id is None or not str(last_id).startswith(prefix):
        return int(f"{prefix}{1:0{CASE_SEQUENCE_DIGITS}d}")
    sequence = int(str(last_id)[-CASE_SEQUENCE_DIGITS:]) + 1
    return int(f"{prefix}{sequence:0{CASE_SEQUENCE_DIGITS}d}")


class ComplaintDraft(LuponModel):
    case_title: str = Field(min_length=1)
    case_description: str = ""
    nature_of_case: str = ""
    relief_description: str = ""
    complainant: Party
    respondent: Party
    witness: Optional[Party] = None
    user_id: Optional[int] = None

    @field_validator("case_title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("case_title is required")
        return v

    def validate_parties(self) -> None:
        if not self.complainant.is_present:
            raise ValidationError("Complainant is required", code="MISSING_PARTY")
        if not self.respondent.is_present:
            raise ValidationError("Respondent is required", code="MISSING_PARTY")
        validate_parties(self.complainant, self.respondent, self.witness)

    def form_fields(self) -> dict[str, Any]:
        """Fields for the multipart body; parties are passed as dicts for JSON encoding."""
        fields: dict[str, Any] = {
            "case_title": self.case_title,
            "case_description": self.case_description,
            "nature_of_case": self.nature_of_case,
            "relief_description": self.relief_description,
            "complainant": self.complainant.model_dump(exclude_none=True),
            "respondent": self.respondent.model_dump(exclude_none=True),
        }
        if self.witness is not None and self.witness.is_present:
            fields["witness"] = self.witness.model_dump(exclude_none=True)
        if self.user_id is not None:
            fields["user_id"] = self.user_id
        return fields


def residents_from_payload(rows: Iterable[dict[str, Any]]) -> list[Party]:
    """Parties from a ``/api/residents`` listing or search."""
    return [Party.model_validate(row) for row in rows]


class Referral(LuponModel):
    """A complaint transferred to another agency."""

    id: int
    original_complaint_id: Optional[int] = None
    case_title: Optional[str] = None
    case_description: Optional[str] = None
    nature_of_case: Optional[str] = None
    relief_sought: Optional[str] = None
    complainant: Optional[Party] = None
    respondent: Optional[Party] = None
    witness: Optional[Party] = None
    referred_to: str = ""
    referral_reason: Optional[str] = None
    referred_by: Optional[str] = None
    date_referred: Optional[str] = None
    status: Optional[str] = None

    @field_validator("date_referred", mode="before")
    @classmethod
    def _date_referred(cls, v: object) -> object:
        return date_only(v)
