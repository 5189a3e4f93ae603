"""
NEMT Matcher.

Pairs appointments that have no transportation yet with pending pickups of
the same client. A pickup is a candidate when its start lies within the
tolerance of the appointment start; the nearest candidate wins, and
appointments claim in ascending start order so a pickup is used only once.
"""

import logging
from datetime import date as date_type, datetime
from typing import Iterable, List, Optional, Tuple, Union

from models import Appointment, NEMTOccurrence, NemtMatchResult, UnmatchedReason
from .config import MatcherConfig, ScheduleContext
from .errors import ParseError
from .intervals import parse_date, parse_timestamp
from .state import MatchState

logger = logging.getLogger(__name__)


def pickup_datetime(occurrence: NEMTOccurrence) -> Optional[datetime]:
    if occurrence.pickup_time is None:
        return None
    return datetime.combine(occurrence.transportation_date, occurrence.pickup_time)


def difference_minutes(appointment_start: datetime, pickup: datetime) -> int:
    """Signed minutes from the pickup to the appointment start."""
    return round((appointment_start - pickup).total_seconds() / 60)


class NemtMatcher:
    """
    Batch matcher over a snapshot of appointments and occurrences.
    Never raises for an individual record; unmatched appointments are reported.
    """

    def __init__(
        self,
        appointments: Iterable[Appointment],
        occurrences: Iterable[NEMTOccurrence],
        config: Optional[MatcherConfig] = None,
        context: Optional[ScheduleContext] = None
    ):
        self.appointments = list(appointments)
        self.occurrences = list(occurrences)
        self.config = config or MatcherConfig()
        self.context = context

    def run(
        self,
        start_date: Union[date_type, str],
        end_date: Union[date_type, str]
    ) -> NemtMatchResult:
        """
        Execute one matching pass over [start_date, end_date).
        """
        start = parse_date(start_date)
        end = parse_date(end_date)
        if end < start:
            raise ValueError(f"Range end {end} is before start {start}")

        state = MatchState()
        self._fill_pool(state, start, end)

        for appointment, appointment_start in self._eligible_appointments(start, end):
            self._match_one(state, appointment, appointment_start)

        stats = state.get_statistics()
        logger.info(
            f"NEMT matching {start}..{end}: {stats['matched_count']} matched, "
            f"{stats['unmatched_count']} unmatched, {stats['unclaimed_occurrences']} pickups left"
        )
        return state.to_result(start, end)

    def _fill_pool(self, state: MatchState, start: date_type, end: date_type) -> None:
        """Occurrences in range that are live, timed and not linked to any appointment yet."""
        linked = {a.nemt_occurrence_id for a in self.appointments if a.nemt_occurrence_id is not None}

        for occurrence in self.occurrences:
            if not (start <= occurrence.transportation_date < end):
                continue
            if occurrence.is_cancelled or occurrence.id in linked:
                continue
            if occurrence.pickup_time is None:
                logger.debug(f"Occurrence {occurrence.id} has no pickup time, left out of the pool")
                continue
            state.add_occurrence(occurrence)

    def _eligible_appointments(self, start: date_type, end: date_type) -> List[Tuple[Appointment, datetime]]:
        """Unlinked appointments in range, by ascending start (ties keep input order)."""
        eligible = []
        for appointment in self.appointments:
            if appointment.status not in self.config.eligible_statuses:
                continue
            if appointment.nemt_occurrence_id is not None:
                continue
            try:
                appointment_start = parse_timestamp(appointment.start_time, self.context)
            except ParseError as e:
                logger.warning(f"Skipping appointment {appointment.id} in NEMT matching: {e}")
                continue
            if start <= appointment_start.date() < end:
                eligible.append((appointment, appointment_start))

        eligible.sort(key=lambda pair: pair[1])
        return eligible

    def _match_one(self, state: MatchState, appointment: Appointment, appointment_start: datetime) -> None:
        pooled = state.occurrences_for(appointment.client_id)
        if not pooled:
            state.record_failure(appointment, UnmatchedReason.NO_OCCURRENCE_FOR_CLIENT)
            return

        tolerance = self.config.tolerance_minutes
        best = None
        nearest = None
        blocked_by_claim = False

        for order, occurrence in enumerate(pooled):
            diff = difference_minutes(appointment_start, pickup_datetime(occurrence))
            if nearest is None or abs(diff) < abs(nearest):
                nearest = diff
            if abs(diff) > tolerance:
                continue
            if state.is_claimed(occurrence.id):
                blocked_by_claim = True
                continue
            # Nearest pickup wins; equal distance keeps the earlier occurrence
            if best is None or (abs(diff), order) < (abs(best[1]), best[2]):
                best = (occurrence, diff, order)

        if best is None:
            reason = UnmatchedReason.ALREADY_CLAIMED if blocked_by_claim else UnmatchedReason.OUTSIDE_TOLERANCE
            logger.debug(f"Appointment {appointment.id} unmatched: {reason.value} (nearest {nearest} min)")
            state.record_failure(appointment, reason, nearest)
            return

        occurrence, diff, _ = best
        logger.debug(f"Appointment {appointment.id} -> occurrence {occurrence.id} ({diff:+d} min)")
        state.claim(appointment, occurrence, diff)


def match_nemt(
    start_date: Union[date_type, str],
    end_date: Union[date_type, str],
    appointments: Iterable[Appointment],
    occurrences: Iterable[NEMTOccurrence],
    config: Optional[MatcherConfig] = None,
    context: Optional[ScheduleContext] = None
) -> NemtMatchResult:
    return NemtMatcher(appointments, occurrences, config, context).run(start_date, end_date)
