"""
Data models package for the Scheduling & Availability Engine.

This package exports the three pillars of the data architecture:
1. Subjects (Subject, WorkingHoursWindow, TimeOff)
2. Events (Appointment, Activity, NEMTOccurrence)
3. Output (Interval, BusySlot, AvailableSlot, ConflictInfo, Placement, ...)
"""

from .subject import (
    Subject,
    SubjectKind,
    WorkingHoursWindow,
    TimeOff
)

from .event import (
    Appointment,
    AppointmentStatus,
    Activity,
    ScheduledEvent,
    parse_events,
    split_events
)

from .schedule import (
    MINUTES_PER_DAY,
    format_clock,
    Interval,
    BusySlot,
    BusySlotKind,
    Timeline,
    AvailableSlot,
    AvailabilityResult,
    ConflictType,
    ConflictProposal,
    ConflictInfo,
    Placement,
    DateBucket,
    DaySummary
)

from .transport import (
    NEMTOccurrence,
    NemtPair,
    NemtMatchResult,
    UnmatchedAppointment,
    UnmatchedReason
)

__all__ = [
    # --- Subject Models ---
    "Subject",
    "SubjectKind",
    "WorkingHoursWindow",
    "TimeOff",

    # --- Event Models ---
    "Appointment",
    "AppointmentStatus",
    "Activity",
    "ScheduledEvent",
    "parse_events",
    "split_events",
    "NEMTOccurrence",

    # --- Output Models ---
    "MINUTES_PER_DAY",
    "format_clock",
    "Interval",
    "BusySlot",
    "BusySlotKind",
    "Timeline",
    "AvailableSlot",
    "AvailabilityResult",
    "ConflictType",
    "ConflictProposal",
    "ConflictInfo",
    "Placement",
    "DateBucket",
    "DaySummary",
    "NemtPair",
    "NemtMatchResult",
    "UnmatchedAppointment",
    "UnmatchedReason",
]
