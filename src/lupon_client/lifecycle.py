"""
Session and case lifecycle rules.

A hearing is scheduled, then completed once minutes are recorded. It may be
rescheduled (a new entry is appended, earlier ones stay as history) and the
case eventually ends settled, escalated to the next stage, withdrawn,
referred, or with a certificate to file action.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Sequence

from .clock import DEFAULT_TIMEZONE, as_local, combine_local
from .errors import (
    InitialSessionRemovalError,
    InvalidTransitionError,
    SessionAlreadyCompletedError,
    SessionNotStartedError,
    ValidationError,
)
from .models import CaseStatus, Session, Stage

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    RESCHEDULED = "rescheduled"
    SETTLED = "settled"
    ESCALATED = "escalated"
    WITHDRAWN = "withdrawn"


TERMINAL_STATUSES = frozenset(
    {CaseStatus.SETTLED, CaseStatus.WITHDRAWN, CaseStatus.REFERRED, CaseStatus.CFA}
)

STAGE_ORDER: tuple[CaseStatus, ...] = (
    CaseStatus.PENDING,
    CaseStatus.MEDIATION,
    CaseStatus.CONCILIATION,
    CaseStatus.ARBITRATION,
)


def scheduled_datetime_passed(
    session: Session,
    now: datetime,
    tz_name: str = DEFAULT_TIMEZONE,
) -> bool:
    """True once ``now`` is at or after the session's scheduled date and time."""
    if not session.date or not session.time:
        return False
    try:
        scheduled = combine_local(session.date, session.time, tz_name)
    except ValueError:
        logger.warning(
            "Session %s has an unreadable schedule: %s", session.id, session.scheduled_for
        )
        return False
    return as_local(now, tz_name) >= scheduled


def has_recorded_minutes(session: Session) -> bool:
    """True when a reschedule entry for the exact current slot already carries minutes."""
    if not session.date or not session.time:
        return False
    return any(
        entry.reschedule_date == session.date
        and entry.reschedule_time == session.time
        and entry.has_minutes
        for entry in session.reschedules
    )


def ensure_can_complete(
    session: Session,
    now: datetime,
    *,
    stage: Stage | None = None,
    tz_name: str = DEFAULT_TIMEZONE,
) -> None:
    """
    Guard recording minutes for the session's current slot.

    Raises:
        SessionNotStartedError: The scheduled date and time has not occurred
        SessionAlreadyCompletedError: Minutes were already recorded for this slot
    """
    label = (stage or session.stage or Stage.MEDIATION).value
    if not scheduled_datetime_passed(session, now, tz_name):
        raise SessionNotStartedError(label, session.scheduled_for)
    if has_recorded_minutes(session):
        raise SessionAlreadyCompletedError(label, session.scheduled_for)


def ensure_removable(sessions: Sequence[Session], index: int) -> Session:
    """
    Return the session at ``index`` if it may be removed.

    Raises:
        InitialSessionRemovalError: ``index`` is the first session
        ValidationError: ``index`` is out of range
    """
    if index == 0:
        raise InitialSessionRemovalError()
    if index < 0 or index >= len(sessions):
        raise ValidationError(
            f"No session at position {index}",
            code="SESSION_INDEX_OUT_OF_RANGE",
            details={"index": index, "count": len(sessions)},
        )
    return sessions[index]


def session_state(session: Session, case_status: CaseStatus | None = None) -> SessionState:
    """Derive where a session sits in its lifecycle."""
    if case_status is CaseStatus.SETTLED:
        return SessionState.SETTLED
    if case_status is CaseStatus.WITHDRAWN:
        return SessionState.WITHDRAWN
    if case_status in {CaseStatus.REFERRED, CaseStatus.CFA}:
        return SessionState.ESCALATED
    if (
        session.stage is not None
        and case_status in STAGE_ORDER
        and STAGE_ORDER.index(case_status) > STAGE_ORDER.index(session.stage.case_status)
    ):
        return SessionState.ESCALATED
    if has_recorded_minutes(session):
        return SessionState.COMPLETED
    if any(entry.reason and entry.reason != "Initial session" for entry in session.reschedules):
        return SessionState.RESCHEDULED
    return SessionState.SCHEDULED


def next_status(current: CaseStatus, target: CaseStatus) -> CaseStatus:
    """
    Validate a case status change and return the new status.

    Scheduling any stage is allowed from a live case (cases can be moved
    back to mediation, and re-scheduling the current stage keeps it);
    terminal statuses accept nothing further.

    Raises:
        InvalidTransitionError: The change is not allowed
    """
    if current in TERMINAL_STATUSES or target is CaseStatus.PENDING:
        raise InvalidTransitionError(current.value, target.value)
    if target in {CaseStatus.MEDIATION, CaseStatus.CONCILIATION, CaseStatus.ARBITRATION}:
        return target
    if target is CaseStatus.CFA and current is CaseStatus.PENDING:
        raise InvalidTransitionError(current.value, target.value)
    return target


def ensure_open(current: CaseStatus, action: str) -> None:
    """
    Refuse work on a case that has already ended.

    Raises:
        InvalidTransitionError: ``current`` is a terminal status
    """
    if current in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            current.value, action, message=f"Cannot {action} a case that is {current.value}"
        )


def escalate(current: CaseStatus) -> CaseStatus:
    """Move a case to the next hearing stage."""
    if current not in STAGE_ORDER or current is CaseStatus.ARBITRATION:
        raise InvalidTransitionError(current.value, "next stage")
    return STAGE_ORDER[STAGE_ORDER.index(current) + 1]
