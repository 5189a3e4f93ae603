"""
Event Source Normalizer.

Merges one subject's appointments, activities, time off and working hours
for a date into a single ordered timeline of busy slots. Malformed records
are logged and skipped so one bad row never blanks a calendar.
"""

import logging
from datetime import date as date_type, timedelta
from typing import Iterable, List, Optional, Tuple, Union

from models import (
    Activity, Appointment, AppointmentStatus, BusySlot, BusySlotKind,
    Interval, MINUTES_PER_DAY, Subject, Timeline, TimeOff, WorkingHoursWindow
)
from .config import ScheduleContext, TimelineConfig
from .errors import ParseError
from .intervals import merge_intervals, parse_date, parse_timestamp

logger = logging.getLogger(__name__)

# Tie-break on equal start: appointments before activities
SOURCE_RANK = {"appointment": 0, "activity": 1}


def resolve_event_span(
    event: Union[Appointment, Activity],
    context: Optional[ScheduleContext] = None
) -> Tuple[date_type, int, Optional[int]]:
    """
    Returns (date, start_minute, end_minute) for a raw event.
    end_minute is None when the event has no end time.
    An end at midnight of the following day maps to 1440.
    """
    start = parse_timestamp(event.start_time, context)
    start_minute = start.hour * 60 + start.minute
    if event.end_time is None:
        return start.date(), start_minute, None

    end = parse_timestamp(event.end_time, context)
    if end.date() == start.date():
        end_minute = end.hour * 60 + end.minute
    elif end.date() == start.date() + timedelta(days=1) and end.hour == 0 and end.minute == 0:
        end_minute = MINUTES_PER_DAY
    else:
        raise ParseError(event.end_time, "same-day end timestamp")

    if end_minute <= start_minute:
        raise ParseError(event.end_time, "end timestamp after start")
    return start.date(), start_minute, end_minute


def resolve_time_off(subject: Subject, target: date_type) -> Optional[TimeOff]:
    for record in subject.time_off:
        if record.covers(target):
            return record
    return None


def resolve_working_windows(subject: Subject, target: date_type) -> List[Interval]:
    """
    Active windows for the date as a disjoint sorted list.
    Date-keyed records override the weekly template, even when inactive.
    """
    dated = [w for w in subject.working_hours if w.date is not None and w.applies_to(target)]
    candidates: List[WorkingHoursWindow] = dated or [
        w for w in subject.working_hours if w.date is None and w.applies_to(target)
    ]
    return merge_intervals(
        Interval(start_minute=w.start_minute, end_minute=w.end_minute)
        for w in candidates if w.is_active
    )


def _appointment_slot(
    appointment: Appointment,
    subject: Subject,
    target: date_type,
    config: TimelineConfig,
    context: Optional[ScheduleContext],
    same_client_id: Optional[int]
) -> Optional[BusySlot]:
    if subject.is_team:
        if appointment.team_id != subject.id:
            return None
        kind = BusySlotKind.TEAM_APPOINTMENT
    else:
        if appointment.client_id != subject.id:
            return None
        kind = BusySlotKind.CLIENT_APPOINTMENT

    if appointment.status in config.ignored_statuses:
        return None

    event_date, start_minute, end_minute = resolve_event_span(appointment, context)
    if event_date != target:
        return None
    if end_minute is None:
        logger.debug(f"Appointment {appointment.id} has no end time, left out of busy slots")
        return None

    completed_early = False
    scheduled_end = None
    if appointment.status == AppointmentStatus.COMPLETED and appointment.completed_at:
        try:
            done = parse_timestamp(appointment.completed_at, context)
        except ParseError as e:
            logger.warning(f"Ignoring completed_at of appointment {appointment.id}: {e}")
        else:
            done_minute = done.hour * 60 + done.minute
            if done.date() == target and start_minute < done_minute < end_minute:
                scheduled_end = end_minute
                end_minute = done_minute
                completed_early = True

    return BusySlot(
        type=kind,
        title=appointment.display_title,
        event_id=appointment.id,
        start_minute=start_minute,
        end_minute=end_minute,
        completed_early=completed_early,
        scheduled_end_minute=scheduled_end,
        is_same_client=(
            kind == BusySlotKind.TEAM_APPOINTMENT
            and same_client_id is not None
            and appointment.client_id == same_client_id
        )
    )


def _activity_slot(
    activity: Activity,
    subject: Subject,
    target: date_type,
    context: Optional[ScheduleContext]
) -> Optional[BusySlot]:
    if not subject.is_team or activity.team_id != subject.id:
        return None

    event_date, start_minute, end_minute = resolve_event_span(activity, context)
    if event_date != target or end_minute is None:
        return None

    return BusySlot(
        type=BusySlotKind.ACTIVITY,
        title=activity.display_title,
        event_id=activity.id,
        start_minute=start_minute,
        end_minute=end_minute
    )


def collect_busy_slots(
    subject: Subject,
    target: date_type,
    appointments: Iterable[Appointment] = (),
    activities: Iterable[Activity] = (),
    config: Optional[TimelineConfig] = None,
    context: Optional[ScheduleContext] = None,
    same_client_id: Optional[int] = None
) -> List[BusySlot]:
    """Busy slots of one subject on one date, ordered by start then source."""
    config = config or TimelineConfig()
    ranked = []

    for index, appointment in enumerate(appointments):
        try:
            slot = _appointment_slot(appointment, subject, target, config, context, same_client_id)
        except ParseError as e:
            logger.warning(f"Skipping appointment {appointment.id}: {e}")
            continue
        if slot:
            ranked.append((slot.start_minute, SOURCE_RANK["appointment"], index, slot))

    for index, activity in enumerate(activities):
        try:
            slot = _activity_slot(activity, subject, target, context)
        except ParseError as e:
            logger.warning(f"Skipping activity {activity.id}: {e}")
            continue
        if slot:
            ranked.append((slot.start_minute, SOURCE_RANK["activity"], index, slot))

    ranked.sort(key=lambda r: r[:3])
    return [r[3] for r in ranked]


def compute_timeline(
    subject: Subject,
    target_date: Union[date_type, str],
    appointments: Iterable[Appointment] = (),
    activities: Iterable[Activity] = (),
    config: Optional[TimelineConfig] = None,
    context: Optional[ScheduleContext] = None,
    same_client_id: Optional[int] = None
) -> Timeline:
    """
    Merge every event source of a subject for one date.

    Time off suppresses the working-hours window entirely; busy slots are
    still reported so callers can show what was already booked.
    """
    target = parse_date(target_date)
    time_off = resolve_time_off(subject, target)
    windows = [] if time_off else resolve_working_windows(subject, target)

    busy = collect_busy_slots(
        subject, target, appointments, activities,
        config=config, context=context, same_client_id=same_client_id
    )

    return Timeline(
        subject_id=subject.id,
        subject_kind=subject.kind,
        date=target,
        busy_slots=busy,
        working_windows=windows,
        is_time_off=time_off is not None,
        time_off=time_off
    )
