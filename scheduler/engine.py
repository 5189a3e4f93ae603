"""
The Scheduling & Availability Engine facade.

Holds one in-memory snapshot of an agency's calendars (subjects, appointments,
activities, transportation occurrences) and exposes every operation over it:
1. Timelines (Event Source Normalizer)
2. Grid placement (day, week and month views)
3. Availability and conflict checks for a proposed booking
4. NEMT matching over a date range
5. Day summaries

The snapshot is read-only; nothing here persists results.
"""

import logging
import threading
from datetime import date as date_type
from typing import Iterable, List, Optional, Union

from models import (
    Activity, Appointment, AvailabilityResult, ConflictInfo, ConflictProposal,
    DateBucket, DaySummary, NEMTOccurrence, NemtMatchResult, Placement,
    Subject, SubjectKind, Timeline
)
from .availability import compute_availability
from .config import EngineSettings
from .constraints import ConflictChecker
from .errors import UnknownSubjectError
from .intervals import parse_date
from .nemt import NemtMatcher
from .placement import VisibleWindow, group_by_date, month_dates, place_on_grid, week_dates
from .summary import summarize_day
from .timeline import compute_timeline

logger = logging.getLogger(__name__)

KindLike = Union[SubjectKind, str]
DateLike = Union[date_type, str]


class SchedulingEngine:
    """
    Main entry point for calendar views, booking forms and the NEMT job.
    """

    def __init__(
        self,
        subjects: Iterable[Subject],
        appointments: Iterable[Appointment] = (),
        activities: Iterable[Activity] = (),
        occurrences: Iterable[NEMTOccurrence] = (),
        settings: Optional[EngineSettings] = None
    ):
        self.settings = settings or EngineSettings()
        self.appointments = list(appointments)
        self.activities = list(activities)
        self.occurrences = list(occurrences)

        # Lookups
        self.subjects = {(s.kind, s.id): s for s in subjects}

        # Claim-pool passes over the same snapshot must not interleave
        self._match_lock = threading.Lock()

        logger.debug(
            f"Engine snapshot: {len(self.subjects)} subjects, {len(self.appointments)} appointments, "
            f"{len(self.activities)} activities, {len(self.occurrences)} occurrences"
        )

    @property
    def context(self):
        return self.settings.context

    def get_subject(self, kind: KindLike, subject_id: int) -> Subject:
        kind = SubjectKind(kind)
        try:
            return self.subjects[(kind, subject_id)]
        except KeyError:
            raise UnknownSubjectError(kind.value, subject_id) from None

    def subjects_of(self, kind: KindLike) -> List[Subject]:
        kind = SubjectKind(kind)
        return [s for (k, _), s in self.subjects.items() if k == kind]

    def events_of(self, subject: Subject) -> List[Union[Appointment, Activity]]:
        """Raw events a subject takes part in, in snapshot order."""
        if subject.is_team:
            events = [a for a in self.appointments if a.team_id == subject.id]
            events.extend(a for a in self.activities if a.team_id == subject.id)
        else:
            events = [a for a in self.appointments if a.client_id == subject.id]
        ignored = self.settings.timeline.ignored_statuses
        return [e for e in events if not isinstance(e, Appointment) or e.status not in ignored]

    # --- Timelines ---

    def compute_timeline(self, kind: KindLike, subject_id: int, target_date: DateLike) -> Timeline:
        return compute_timeline(
            self.get_subject(kind, subject_id), target_date,
            self.appointments, self.activities,
            config=self.settings.timeline, context=self.context
        )

    def timelines_for(self, kind: KindLike, target_date: DateLike) -> List[Timeline]:
        return [
            compute_timeline(
                subject, target_date, self.appointments, self.activities,
                config=self.settings.timeline, context=self.context
            )
            for subject in self.subjects_of(kind)
        ]

    # --- Grids ---

    def place_on_grid(
        self,
        kind: KindLike,
        subject_id: int,
        target_date: DateLike,
        window: Optional[VisibleWindow] = None
    ) -> List[Placement]:
        """Day view row for one subject."""
        target = parse_date(target_date)
        subject = self.get_subject(kind, subject_id)
        (bucket,) = group_by_date(self.events_of(subject), [target], self.context)
        return place_on_grid(
            bucket.events, window or VisibleWindow(),
            policy=self.settings.placement,
            context=self.context,
            timeline_config=self.settings.timeline
        )

    def week_grid(self, kind: KindLike, subject_id: int, anchor: DateLike) -> List[DateBucket]:
        subject = self.get_subject(kind, subject_id)
        return group_by_date(self.events_of(subject), week_dates(parse_date(anchor)), self.context)

    def month_grid(self, kind: KindLike, subject_id: int, year: int, month: int) -> List[DateBucket]:
        subject = self.get_subject(kind, subject_id)
        return group_by_date(self.events_of(subject), month_dates(year, month), self.context)

    # --- Booking checks ---

    def compute_availability(
        self,
        kind: KindLike,
        subject_id: int,
        target_date: DateLike,
        duration_minutes: int,
        client_id: Optional[int] = None
    ) -> AvailabilityResult:
        client = self.get_subject(SubjectKind.CLIENT, client_id) if client_id is not None else None
        return compute_availability(
            self.get_subject(kind, subject_id), target_date, duration_minutes,
            self.appointments, self.activities,
            client=client,
            config=self.settings.timeline,
            context=self.context
        )

    def check_conflicts(self, proposal: ConflictProposal) -> List[ConflictInfo]:
        checker = ConflictChecker(self.appointments, self.activities, self.settings.timeline, self.context)
        return checker.check(proposal)

    # --- Batch jobs ---

    def match_nemt(self, start_date: DateLike, end_date: DateLike) -> NemtMatchResult:
        matcher = NemtMatcher(self.appointments, self.occurrences, self.settings.matcher, self.context)
        with self._match_lock:
            return matcher.run(start_date, end_date)

    def summarize_day(self, kind: KindLike, target_date: DateLike) -> DaySummary:
        target = parse_date(target_date)
        return summarize_day(target, self.timelines_for(kind, target))
