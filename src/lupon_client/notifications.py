"""Case notification types and the wording the backend attaches to them."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable

from .models import Notification, Stage


class NotificationType(str, Enum):
    CASE_ACCEPTED = "case_accepted"
    CASE_FOR_APPROVAL = "case_for_approval"
    MEDIATION_SCHEDULED = "mediation_scheduled"
    CONCILIATION_SCHEDULED = "conciliation_scheduled"
    ARBITRATION_SCHEDULED = "arbitration_scheduled"
    CASE_SETTLED = "case_settled"
    CASE_TRANSFERRED = "case_transferred"
    SESSION_RESCHEDULED = "session_rescheduled"
    CASE_WITHDRAWN = "case_withdrawn"


_TEMPLATES: dict[str, tuple[str, str]] = {
    NotificationType.CASE_ACCEPTED.value: (
        "Case Accepted",
        'Your complaint "{title}" has been officially accepted and is now being processed.',
    ),
    NotificationType.CASE_FOR_APPROVAL.value: (
        "New Case for Approval",
        "A new complaint (Case #{case_id}) has been filed and requires approval. "
        "Please review the case details in the Cases for Approval section.",
    ),
    NotificationType.MEDIATION_SCHEDULED.value: (
        "Mediation Scheduled",
        'Your case "{title}" has been scheduled for mediation. '
        "Please check your dashboard for details.",
    ),
    NotificationType.CONCILIATION_SCHEDULED.value: (
        "Conciliation Scheduled",
        'Your case "{title}" has been scheduled for conciliation. '
        "Please check your dashboard for details.",
    ),
    NotificationType.ARBITRATION_SCHEDULED.value: (
        "Arbitration Scheduled",
        'Your case "{title}" has been scheduled for arbitration. '
        "Please check your dashboard for details.",
    ),
    NotificationType.CASE_SETTLED.value: (
        "Case Settled",
        'Your case "{title}" has been successfully settled.',
    ),
    NotificationType.CASE_TRANSFERRED.value: (
        "Case Referred",
        'Your case "{title}" has been referred to another agency for further processing.',
    ),
    NotificationType.SESSION_RESCHEDULED.value: (
        "Session Rescheduled",
        'A session for your case "{title}" has been rescheduled. '
        "Please check your dashboard for the new schedule.",
    ),
    NotificationType.CASE_WITHDRAWN.value: (
        "Case Withdrawn",
        'The case "{title}" has been withdrawn.',
    ),
}

_DEFAULT_TEMPLATE = ("Case Update", 'There has been an update to your case "{title}".')


def render(
    notification_type: NotificationType | str,
    case_title: str,
    case_id: Any = None,
) -> tuple[str, str]:
    """Title and message for a notification about ``case_title``."""
    key = getattr(notification_type, "value", notification_type)
    title, template = _TEMPLATES.get(key, _DEFAULT_TEMPLATE)
    return title, template.format(title=case_title, case_id=case_id)


def scheduled_type(stage: Stage) -> NotificationType:
    return NotificationType(f"{stage.value}_scheduled")


def parse_notifications(payload: dict[str, Any]) -> list[Notification]:
    """Models from a ``GET /api/notifications`` response."""
    return [Notification.model_validate(item) for item in payload.get("notifications", [])]


def unread(notifications: Iterable[Notification]) -> list[Notification]:
    return [item for item in notifications if not item.is_read]
