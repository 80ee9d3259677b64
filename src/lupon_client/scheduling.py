"""
Hearing scheduling with local pre-validation.

Every schedule and reschedule goes through the same steps: check the case
is still open, reject closed dates locally, fetch the day's booked times,
run the advisory conflict checks, and only then submit to the backend. Completion and removal apply the session lifecycle guards first.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Sequence

from .calendar_grid import is_selectable
from .client import LuponClient, UploadFile
from .clock import as_local, local_now, parse_date
from .conflicts import ConflictValidator, SlotDecision, SlotRejection
from .errors import ValidationError
from .lifecycle import ensure_can_complete, ensure_open, ensure_removable, next_status
from .models import CaseStatus, Session, SlotAvailability, Stage

logger = logging.getLogger(__name__)

SETTLEMENT_AGREEMENT_SEPARATOR = "; "

_LOCAL_REJECTIONS = frozenset(
    {SlotRejection.MISSING_INPUT, SlotRejection.DATE_UNAVAILABLE, SlotRejection.IN_PAST}
)


class SlotQuery:
    """Fetches a day's booked times for a stage."""

    def __init__(self, client: LuponClient) -> None:
        self.client = client

    async def fetch(
        self,
        stage: Stage,
        day: str,
        *,
        exclude_session_id: int | None = None,
    ) -> SlotAvailability:
        payload = await self.client.available_slots(
            stage, day, exclude_session_id=exclude_session_id
        )
        availability = SlotAvailability.from_response(payload)
        logger.debug(
            "slots %s %s: used=%s/%s full=%s",
            stage.value,
            day,
            availability.used_slots,
            availability.max_slots_per_day,
            availability.is_full,
        )
        return availability


class Scheduler:
    """Schedules, reschedules, completes and removes hearing sessions, and closes cases."""

    def __init__(
        self,
        client: LuponClient,
        validator: ConflictValidator | None = None,
        slot_query: SlotQuery | None = None,
    ) -> None:
        self.client = client
        settings = client.settings
        self.validator = validator or ConflictValidator(
            capacity=settings.max_sessions_per_day,
            min_gap_minutes=settings.min_session_gap_minutes,
        )
        self.slot_query = slot_query or SlotQuery(client)
        self.tz_name = settings.timezone

    def now(self) -> datetime:
        return local_now(self.tz_name)

    def _local(self, now: datetime | None) -> datetime:
        return as_local(now, self.tz_name) if now is not None else self.now()

    async def check(
        self,
        stage: Stage,
        day: str,
        time: str,
        *,
        session: Session | None = None,
        now: datetime | None = None,
    ) -> SlotDecision:
        """Run the advisory checks for a candidate slot against the backend's bookings."""
        current = self._local(now)
        # Missing input, closed dates and past slots do not depend on bookings.
        early = self.validator.check(day, time, [], now=current)
        if early.reason in _LOCAL_REJECTIONS:
            return early
        availability = await self.slot_query.fetch(
            stage, day, exclude_session_id=session.id if session else None
        )
        own_slot = session.time if session is not None and session.date == day else None
        return self.validator.check(
            day,
            time,
            availability.booked_times or availability.scheduled_times,
            own_slot=own_slot,
            is_full=availability.is_full,
            now=current,
        )

    async def available_times(
        self,
        stage: Stage,
        day: str,
        *,
        session: Session | None = None,
        now: datetime | None = None,
    ) -> list[str]:
        current = self._local(now)
        if not is_selectable(parse_date(day), current.date()):
            return []
        availability = await self.slot_query.fetch(
            stage, day, exclude_session_id=session.id if session else None
        )
        own_slot = session.time if session is not None and session.date == day else None
        return self.validator.available_times(
            day,
            availability.booked_times or availability.scheduled_times,
            own_slot=own_slot,
            is_full=availability.is_full,
            now=current,
        )

    async def schedule(
        self,
        stage: Stage,
        *,
        complaint_id: int,
        case_status: CaseStatus,
        day: str,
        time: str,
        panel: Sequence[str] | None = None,
        now: datetime | None = None,
    ) -> dict:
        """
        Schedule the first hearing of ``stage`` for a case.

        Raises:
            InvalidTransitionError: The case cannot move to ``stage``
            SlotConflictError: The slot fails the advisory checks
        """
        next_status(case_status, stage.case_status)
        decision = await self.check(stage, day, time, now=now)
        decision.raise_for_rejection()

        members = [m for m in (panel or []) if m and m.strip()]
        if stage is Stage.MEDIATION:
            result = await self.client.schedule_mediation(
                complaint_id=complaint_id, date=day, time=time
            )
        elif stage is Stage.CONCILIATION:
            result = await self.client.schedule_conciliation(
                complaint_id=complaint_id, date=day, time=time, panel=members
            )
        else:
            result = await self.client.schedule_arbitration(
                complaint_id=complaint_id, date=day, time=time, panel_members=members
            )
        logger.info("Scheduled %s for case %s on %s %s", stage.value, complaint_id, day, time)
        return result

    async def reschedule(
        self,
        stage: Stage,
        session: Session,
        *,
        case_status: CaseStatus,
        day: str,
        time: str,
        reason: str,
        now: datetime | None = None,
    ) -> dict:
        """
        Move a session to a new slot; its own current slot does not count against it.

        Raises:
            InvalidTransitionError: The case has already ended
            SlotConflictError: The slot fails the advisory checks
        """
        ensure_open(case_status, "reschedule")
        decision = await self.check(stage, day, time, session=session, now=now)
        decision.raise_for_rejection()

        kwargs = {
            stage.session_id_field: session.id,
            "reschedule_date": day,
            "reschedule_time": time,
            "reason": reason,
        }
        if stage is Stage.MEDIATION:
            result = await self.client.reschedule_mediation(**kwargs)
        elif stage is Stage.CONCILIATION:
            result = await self.client.reschedule_conciliation(**kwargs)
        else:
            result = await self.client.reschedule_arbitration(**kwargs)
        logger.info("Rescheduled %s session %s to %s %s", stage.value, session.id, day, time)
        return result

    async def complete(
        self,
        stage: Stage,
        session: Session,
        *,
        minutes: str,
        files: Iterable[UploadFile] = (),
        now: datetime | None = None,
    ) -> dict:
        """
        Record minutes (and documentation) for the session's current slot.

        Raises:
            ValidationError: Minutes are blank
            SessionNotStartedError: The scheduled time has not arrived
            SessionAlreadyCompletedError: This slot already has minutes
        """
        if not minutes or not minutes.strip():
            raise ValidationError(
                "Please enter the minutes of the session.", code="MISSING_MINUTES"
            )
        ensure_can_complete(session, now or self.now(), stage=stage, tz_name=self.tz_name)

        if stage is Stage.MEDIATION:
            return await self.client.save_mediation_session(
                mediation_id=session.id, minutes=minutes, photos=files
            )
        if stage is Stage.CONCILIATION:
            return await self.client.save_conciliation_session(
                conciliation_id=session.id, minutes=minutes, photos=files
            )
        return await self.client.save_arbitration_session(
            arbitration_id=session.id, minutes=minutes, documentation=files
        )

    async def remove_session(self, stage: Stage, sessions: Sequence[Session], index: int) -> dict:
        """
        Remove a later session of a case; the first one always stays.

        Raises:
            InitialSessionRemovalError: ``index`` is 0
        """
        target = ensure_removable(sessions, index)
        if stage is Stage.MEDIATION:
            return await self.client.soft_delete_mediation_session(target.id)
        if stage is Stage.CONCILIATION:
            return await self.client.delete_conciliation_session(target.id)
        return await self.client.delete_arbitration_session(target.id)

    async def settle(
        self,
        stage: Stage,
        *,
        complaint_id: int,
        case_status: CaseStatus,
        agreements: Iterable[str],
        remarks: str | None = None,
        settlement_date: str | date | None = None,
    ) -> dict:
        """
        Record an amicable settlement reached at ``stage``.

        Raises:
            InvalidTransitionError: The case has already ended
            ValidationError: No agreement was given
        """
        next_status(case_status, CaseStatus.SETTLED)
        text = SETTLEMENT_AGREEMENT_SEPARATOR.join(a.strip() for a in agreements if a and a.strip())
        if not text:
            raise ValidationError("Please add at least one agreement.", code="MISSING_AGREEMENTS")
        if settlement_date is None:
            settlement_date = self.now().date()
        if isinstance(settlement_date, str):
            settlement_date = parse_date(settlement_date)
        return await self.client.create_settlement(
            complaint_id=complaint_id,
            settlement_type=stage.value,
            settlement_date=settlement_date.isoformat(),
            agreements=text,
            remarks=remarks or None,
        )

    async def refer(
        self,
        *,
        complaint_id: int,
        case_status: CaseStatus,
        referred_to: str,
        reason: str | None = None,
    ) -> dict:
        """
        Transfer a case to another agency; the complaint becomes a referral.

        Raises:
            InvalidTransitionError: The case has already ended
            ValidationError: No receiving agency was given
        """
        next_status(case_status, CaseStatus.REFERRED)
        if not referred_to or not referred_to.strip():
            raise ValidationError(
                "Please enter where the case is referred to.", code="MISSING_REFERRAL"
            )
        result = await self.client.transfer_complaint(
            complaint_id, referred_to=referred_to.strip(), referral_reason=reason or None
        )
        logger.info("Referred case %s to %s", complaint_id, referred_to.strip())
        return result


def sessions_from_payload(stage: Stage, rows: Iterable[dict[str, Any]]) -> list[Session]:
    """Session models from a stage listing, tagged with their stage."""
    return [Session.model_validate({**row, "stage": stage}) for row in rows]
