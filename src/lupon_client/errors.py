"""
Domain-specific exceptions for the Lupon client.

These carry a business-focused message plus a stable code so callers can
surface them directly (alert banners, CLI output) without string matching.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base exception for all domain-specific errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "code": self.code, "details": self.details}


class ValidationError(DomainError):
    """Raised when input validation fails."""


class ConflictError(DomainError):
    """Raised when there's a conflict with existing data."""


class BusinessRuleError(DomainError):
    """Raised when a business rule is violated."""


# Specific business exceptions


class SlotConflictError(ConflictError):
    """Raised when a candidate time slot fails the advisory conflict checks."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "SLOT_CONFLICT",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details or {})


class SessionNotStartedError(BusinessRuleError):
    """Raised when a session is completed before its scheduled time."""

    def __init__(self, stage: str, scheduled_for: str) -> None:
        super().__init__(
            message=(
                f"You cannot start the {stage} yet. "
                "The scheduled date and time has not occurred."
            ),
            code="SESSION_NOT_STARTED",
            details={"stage": stage, "scheduled_for": scheduled_for},
        )


class SessionAlreadyCompletedError(BusinessRuleError):
    """Raised when minutes were already recorded for the current slot."""

    def __init__(self, stage: str, scheduled_for: str) -> None:
        super().__init__(
            message=(
                f"This {stage} session has already been completed. "
                "Please reschedule for a new session."
            ),
            code="SESSION_ALREADY_COMPLETED",
            details={"stage": stage, "scheduled_for": scheduled_for},
        )


class InitialSessionRemovalError(BusinessRuleError):
    """Raised when removing the first session of a case."""

    def __init__(self) -> None:
        super().__init__(
            message="You cannot remove the initial session.",
            code="INITIAL_SESSION_REMOVAL",
        )


class InvalidTransitionError(BusinessRuleError):
    """Raised when a case status change is not allowed."""

    def __init__(self, current: str, target: str, message: str | None = None) -> None:
        super().__init__(
            message=message or f"Cannot move a case from {current} to {target}",
            code="INVALID_TRANSITION",
            details={"current": current, "target": target},
        )
