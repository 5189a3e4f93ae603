"""
Day summaries for schedule dashboards.

Aggregates a set of timelines for one date into headline numbers:
scheduled hours, people with appointments, utilisation and a load label.
"""

from datetime import date as date_type
from typing import Iterable

from models import BusySlotKind, DaySummary, Timeline
from .intervals import clamp, merge_intervals

# Appointments per scheduled person -> label
LOAD_THRESHOLDS = [
    (0, "Rest"),
    (3, "Low"),
    (6, "Medium"),
]

APPOINTMENT_KINDS = (BusySlotKind.TEAM_APPOINTMENT, BusySlotKind.CLIENT_APPOINTMENT)


def load_label(appointments_per_person: float) -> str:
    for limit, label in LOAD_THRESHOLDS:
        if appointments_per_person <= limit:
            return label
    return "High"


def summarize_day(target_date: date_type, timelines: Iterable[Timeline]) -> DaySummary:
    timelines = list(timelines)
    for timeline in timelines:
        if timeline.date != target_date:
            raise ValueError(f"Timeline for {timeline.date} passed to summary of {target_date}")

    appointment_count = 0
    appointment_minutes = 0
    scheduled_people = 0
    working_minutes = 0
    busy_working_minutes = 0

    for timeline in timelines:
        appointments = [s for s in timeline.busy_slots if s.type in APPOINTMENT_KINDS]
        if appointments:
            scheduled_people += 1
        appointment_count += len(appointments)
        appointment_minutes += sum(s.length for s in appointments)

        merged = merge_intervals(timeline.busy_slots)
        for window in timeline.working_windows:
            working_minutes += window.length
            for block in merged:
                clipped = clamp(block, window.start_minute, window.end_minute)
                if clipped:
                    busy_working_minutes += clipped.length

    utilization = (busy_working_minutes / working_minutes * 100) if working_minutes else 0.0
    per_person = (appointment_count / scheduled_people) if scheduled_people else 0.0

    return DaySummary(
        date=target_date,
        subjects=len(timelines),
        scheduled_people=scheduled_people,
        appointment_count=appointment_count,
        scheduled_hours=round(appointment_minutes / 60, 2),
        working_hours=round(working_minutes / 60, 2),
        utilization=round(utilization, 1),
        load=load_label(per_person)
    )
