"""
Conflict Checker.

This module answers the question: "Does a proposed booking clash with what
the team member or the client already has on that date?"
It does not check working hours; the Availability Calculator does that.
"""

import logging
from typing import Iterable, List, Optional

from models import (
    Activity, Appointment, BusySlot, BusySlotKind, ConflictInfo, ConflictProposal,
    ConflictType, Interval, MINUTES_PER_DAY, Subject, SubjectKind
)
from .config import ScheduleContext, TimelineConfig
from .errors import InvalidDurationError, MissingSubjectError, ParseError
from .intervals import looks_like_timestamp, overlaps, parse_clock, parse_timestamp
from .timeline import collect_busy_slots

logger = logging.getLogger(__name__)

CONFLICT_MESSAGES = {
    ConflictType.TEAM_CONFLICT: "Team member is busy with {title} from {start} to {end}",
    ConflictType.CLIENT_CONFLICT: "Client already has {title} from {start} to {end}",
}


class ConflictChecker:
    """
    Validates proposals against the events visible to the caller.
    """

    def __init__(
        self,
        appointments: Iterable[Appointment],
        activities: Iterable[Activity] = (),
        config: Optional[TimelineConfig] = None,
        context: Optional[ScheduleContext] = None
    ):
        self.appointments = list(appointments)
        self.activities = list(activities)
        self.config = config or TimelineConfig()
        self.context = context

    def proposed_interval(self, proposal: ConflictProposal) -> Interval:
        if proposal.duration_minutes is None or proposal.duration_minutes <= 0:
            raise InvalidDurationError(proposal.duration_minutes)

        if looks_like_timestamp(proposal.start_time.strip()):
            # A full timestamp must fall on the proposal date
            stamp = parse_timestamp(proposal.start_time, self.context)
            if stamp.date() != proposal.date:
                raise ParseError(proposal.start_time, f"time on {proposal.date.isoformat()}")
            start = stamp.hour * 60 + stamp.minute
        else:
            start = parse_clock(proposal.start_time)
        end = start + proposal.duration_minutes
        if end > MINUTES_PER_DAY:
            raise InvalidDurationError(proposal.duration_minutes, "runs past midnight")
        return Interval(start_minute=start, end_minute=end)

    def check(self, proposal: ConflictProposal) -> List[ConflictInfo]:
        """
        Master validation function. Returns an empty list when nothing overlaps.
        Team conflicts come first, each group ordered by start time.
        """
        if proposal.team_id is None and proposal.client_id is None:
            raise MissingSubjectError()

        interval = self.proposed_interval(proposal)
        conflicts = []

        if proposal.team_id is not None:
            subject = Subject(id=proposal.team_id, kind=SubjectKind.TEAM)
            conflicts.extend(self._check_subject(subject, proposal, interval, ConflictType.TEAM_CONFLICT))

        if proposal.client_id is not None:
            subject = Subject(id=proposal.client_id, kind=SubjectKind.CLIENT)
            conflicts.extend(self._check_subject(subject, proposal, interval, ConflictType.CLIENT_CONFLICT))

        if conflicts:
            logger.info(
                f"Proposal on {proposal.date} {interval.start}-{interval.end} has {len(conflicts)} conflict(s)"
            )
        return conflicts

    def _check_subject(
        self,
        subject: Subject,
        proposal: ConflictProposal,
        interval: Interval,
        conflict_type: ConflictType
    ) -> List[ConflictInfo]:
        busy = collect_busy_slots(
            subject, proposal.date, self.appointments, self.activities,
            config=self.config, context=self.context
        )
        return [
            self._describe(slot, conflict_type)
            for slot in busy
            if not self._is_excluded(slot, proposal) and overlaps(slot, interval)
        ]

    @staticmethod
    def _is_excluded(slot: BusySlot, proposal: ConflictProposal) -> bool:
        return (
            proposal.exclude_appointment_id is not None
            and slot.type != BusySlotKind.ACTIVITY
            and slot.event_id == proposal.exclude_appointment_id
        )

    @staticmethod
    def _describe(slot: BusySlot, conflict_type: ConflictType) -> ConflictInfo:
        is_activity = slot.type == BusySlotKind.ACTIVITY
        return ConflictInfo(
            type=conflict_type,
            appointment_id=None if is_activity else slot.event_id,
            activity_id=slot.event_id if is_activity else None,
            title=slot.title,
            start_time=slot.start,
            end_time=slot.end,
            message=CONFLICT_MESSAGES[conflict_type].format(
                title=slot.title, start=slot.start, end=slot.end
            )
        )


def check_conflicts(
    proposal: ConflictProposal,
    appointments: Iterable[Appointment],
    activities: Iterable[Activity] = (),
    config: Optional[TimelineConfig] = None,
    context: Optional[ScheduleContext] = None
) -> List[ConflictInfo]:
    return ConflictChecker(appointments, activities, config, context).check(proposal)
