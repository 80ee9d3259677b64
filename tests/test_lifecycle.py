from datetime import datetime

import pytest
import pytz
from lupon_client.errors import (
    InitialSessionRemovalError,
    InvalidTransitionError,
    SessionAlreadyCompletedError,
    SessionNotStartedError,
    ValidationError,
)
from lupon_client.lifecycle import (
    SessionState,
    ensure_can_complete,
    ensure_open,
    ensure_removable,
    escalate,
    has_recorded_minutes,
    next_status,
    scheduled_datetime_passed,
    session_state,
)
from lupon_client.models import CaseStatus, Session, Stage

MANILA = pytz.timezone("Asia/Manila")


def _session(**overrides) -> Session:
    data = {
        "id": 7,
        "complaint_id": 2025001,
        "stage": "mediation",
        "date": "2025-07-15",
        "time": "14:00",
        "reschedules": [],
    }
    data.update(overrides)
    return Session.model_validate(data)


def _manila(hh: int, mm: int = 0, day: int = 15) -> datetime:
    return MANILA.localize(datetime(2025, 7, day, hh, mm))


def test_scheduled_datetime_passed_at_and_after_start():
    session = _session()
    assert not scheduled_datetime_passed(session, _manila(13, 59))
    assert scheduled_datetime_passed(session, _manila(14, 0))
    assert scheduled_datetime_passed(session, _manila(9, 0, day=16))


def test_scheduled_datetime_passed_converts_utc_now():
    session = _session()
    assert scheduled_datetime_passed(session, datetime(2025, 7, 15, 6, 0, tzinfo=pytz.utc))
    assert not scheduled_datetime_passed(session, datetime(2025, 7, 15, 5, 59, tzinfo=pytz.utc))


def test_session_without_schedule_never_starts():
    assert not scheduled_datetime_passed(_session(time=None), _manila(23))


def test_completing_before_schedule_is_refused():
    with pytest.raises(SessionNotStartedError) as excinfo:
        ensure_can_complete(_session(), _manila(10))
    assert excinfo.value.message.startswith("You cannot start the mediation yet")
    assert excinfo.value.code == "SESSION_NOT_STARTED"


def test_completing_after_schedule_is_allowed():
    ensure_can_complete(_session(), _manila(15))


def test_minutes_on_current_slot_block_completion():
    session = _session(
        reschedules=[
            {"reschedule_date": "2025-07-15", "reschedule_time": "14:00:00", "minutes": "Agreed"}
        ]
    )
    assert has_recorded_minutes(session)
    with pytest.raises(SessionAlreadyCompletedError) as excinfo:
        ensure_can_complete(session, _manila(15), stage=Stage.CONCILIATION)
    assert "conciliation session has already been completed" in excinfo.value.message


def test_minutes_on_earlier_slot_do_not_count():
    session = _session(
        reschedules=[
            {"reschedule_date": "2025-07-10", "reschedule_time": "14:00", "minutes": "Heard"},
            {"reschedule_date": "2025-07-15", "reschedule_time": "14:00", "minutes": "  "},
        ]
    )
    assert not has_recorded_minutes(session)
    ensure_can_complete(session, _manila(15))


def test_initial_session_cannot_be_removed():
    sessions = [_session(id=1), _session(id=2)]
    with pytest.raises(InitialSessionRemovalError) as excinfo:
        ensure_removable(sessions, 0)
    assert excinfo.value.message == "You cannot remove the initial session."
    assert ensure_removable(sessions, 1).id == 2


@pytest.mark.parametrize("index", [-1, 2, 10])
def test_out_of_range_removal(index):
    with pytest.raises(ValidationError) as excinfo:
        ensure_removable([_session(id=1), _session(id=2)], index)
    assert excinfo.value.code == "SESSION_INDEX_OUT_OF_RANGE"


def test_session_state_follows_case_and_minutes():
    scheduled = _session()
    assert session_state(scheduled, CaseStatus.MEDIATION) is SessionState.SCHEDULED
    assert session_state(scheduled, CaseStatus.SETTLED) is SessionState.SETTLED
    assert session_state(scheduled, CaseStatus.WITHDRAWN) is SessionState.WITHDRAWN
    assert session_state(scheduled, CaseStatus.CONCILIATION) is SessionState.ESCALATED
    assert session_state(scheduled, CaseStatus.CFA) is SessionState.ESCALATED

    rescheduled = _session(
        reschedules=[{"reschedule_date": "2025-07-20", "reschedule_time": "09:00", "reason": "Absent"}]
    )
    assert session_state(rescheduled, CaseStatus.MEDIATION) is SessionState.RESCHEDULED

    completed = _session(
        reschedules=[{"reschedule_date": "2025-07-15", "reschedule_time": "14:00", "minutes": "Done"}]
    )
    assert session_state(completed) is SessionState.COMPLETED


def test_next_status_allows_stage_moves_from_live_cases():
    assert next_status(CaseStatus.PENDING, CaseStatus.MEDIATION) is CaseStatus.MEDIATION
    assert next_status(CaseStatus.ARBITRATION, CaseStatus.MEDIATION) is CaseStatus.MEDIATION
    assert next_status(CaseStatus.CONCILIATION, CaseStatus.CONCILIATION) is CaseStatus.CONCILIATION
    assert next_status(CaseStatus.MEDIATION, CaseStatus.SETTLED) is CaseStatus.SETTLED
    assert next_status(CaseStatus.ARBITRATION, CaseStatus.CFA) is CaseStatus.CFA


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (CaseStatus.SETTLED, CaseStatus.MEDIATION),
        (CaseStatus.WITHDRAWN, CaseStatus.CONCILIATION),
        (CaseStatus.CFA, CaseStatus.SETTLED),
        (CaseStatus.MEDIATION, CaseStatus.PENDING),
        (CaseStatus.PENDING, CaseStatus.CFA),
    ],
)
def test_next_status_rejects(current, target):
    with pytest.raises(InvalidTransitionError):
        next_status(current, target)


@pytest.mark.parametrize("status", [CaseStatus.SETTLED, CaseStatus.WITHDRAWN, CaseStatus.REFERRED, CaseStatus.CFA])
def test_ensure_open_rejects_terminal_cases(status):
    with pytest.raises(InvalidTransitionError) as excinfo:
        ensure_open(status, "reschedule")
    assert excinfo.value.code == "INVALID_TRANSITION"
    assert excinfo.value.message == f"Cannot reschedule a case that is {status.value}"


def test_ensure_open_allows_live_cases():
    for status in (CaseStatus.PENDING, CaseStatus.MEDIATION, CaseStatus.ARBITRATION):
        ensure_open(status, "reschedule")


def test_escalate_walks_stage_order():
    assert escalate(CaseStatus.PENDING) is CaseStatus.MEDIATION
    assert escalate(CaseStatus.MEDIATION) is CaseStatus.CONCILIATION
    assert escalate(CaseStatus.CONCILIATION) is CaseStatus.ARBITRATION
    with pytest.raises(InvalidTransitionError):
        escalate(CaseStatus.ARBITRATION)
    with pytest.raises(InvalidTransitionError):
        escalate(CaseStatus.SETTLED)
