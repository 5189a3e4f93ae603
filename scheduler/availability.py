"""
Availability Calculator.

Answers "when can this subject take a booking of N minutes on this date?"
Busy slots are merged into a disjoint cover, the cover is subtracted from
each working window, and every remaining gap that fits the duration yields
one slot anchored at the start of the gap.
"""

import logging
from datetime import date as date_type
from typing import Iterable, List, Optional, Union

from models import (
    Activity, Appointment, AvailabilityResult, AvailableSlot, BusySlot, BusySlotKind,
    Interval, Subject, format_clock
)
from .config import ScheduleContext, TimelineConfig
from .errors import InvalidDurationError
from .intervals import complement, merge_intervals
from .timeline import compute_timeline

logger = logging.getLogger(__name__)


def _freed_by_early_completion(busy: List[BusySlot], gap_start: int) -> bool:
    """True when the gap opens inside the scheduled time of an appointment that finished early."""
    return any(
        s.completed_early and s.scheduled_end_minute is not None
        and s.end_minute <= gap_start < s.scheduled_end_minute
        for s in busy
    )


def fit_slots(
    busy: List[BusySlot],
    windows: List[Interval],
    duration_minutes: int
) -> List[AvailableSlot]:
    """One slot per free gap long enough for the duration, at the gap start."""
    merged = merge_intervals(busy)
    slots = []

    for window in windows:
        for gap in complement(merged, window):
            if gap.length < duration_minutes:
                continue
            slots.append(AvailableSlot(
                start=format_clock(gap.start_minute),
                end=format_clock(gap.start_minute + duration_minutes),
                duration_minutes=duration_minutes,
                due_to_early_completion=_freed_by_early_completion(busy, gap.start_minute)
            ))
    return slots


def compute_availability(
    subject: Subject,
    target_date: Union[date_type, str],
    duration_minutes: int,
    appointments: Iterable[Appointment] = (),
    activities: Iterable[Activity] = (),
    client: Optional[Subject] = None,
    config: Optional[TimelineConfig] = None,
    context: Optional[ScheduleContext] = None
) -> AvailabilityResult:
    """
    Free/busy for a subject on a date.

    When a team member is booked for a specific client, pass the client:
    its appointments join the busy set and the team member's appointments
    with that client are flagged is_same_client.
    """
    if duration_minutes is None or duration_minutes <= 0:
        raise InvalidDurationError(duration_minutes)

    appointments = list(appointments)
    activities = list(activities)
    same_client_id = client.id if client is not None and subject.is_team else None

    timeline = compute_timeline(
        subject, target_date, appointments, activities,
        config=config, context=context, same_client_id=same_client_id
    )
    busy = list(timeline.busy_slots)

    if client is not None and subject.is_team:
        client_timeline = compute_timeline(
            client, timeline.date, appointments, config=config, context=context
        )
        seen = {s.event_id for s in busy if s.type != BusySlotKind.ACTIVITY}
        busy.extend(s for s in client_timeline.busy_slots if s.event_id not in seen)
        # Stable: subject's own slots stay ahead of the client's on equal starts
        busy.sort(key=lambda s: s.start_minute)

    result = AvailabilityResult(
        date=timeline.date,
        duration_minutes=duration_minutes,
        busy_slots=busy,
        time_off=timeline.is_time_off
    )

    if timeline.is_time_off or not timeline.working_windows:
        logger.debug(
            f"{subject.kind.value} {subject.id} unavailable on {timeline.date} "
            f"(time_off={timeline.is_time_off})"
        )
        return result

    result.available_slots = fit_slots(busy, timeline.working_windows, duration_minutes)
    result.working_hours = timeline.working_hours
    return result
