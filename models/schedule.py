"""
Schedule data models for the Scheduling & Availability Engine.

This module defines the 'Output' of the engine:
intervals, busy/free slots, conflicts and grid placements.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict, computed_field, model_validator
from datetime import date as date_type

from .subject import SubjectKind, TimeOff

MINUTES_PER_DAY = 1440


def format_clock(minute: int) -> str:
    """Render a minute of day as 'HH:MM' (1440 renders as '24:00')."""
    return f"{minute // 60:02d}:{minute % 60:02d}"


class Interval(BaseModel):
    """Half-open [start_minute, end_minute) range on a single date."""
    start_minute: int = Field(ge=0, lt=MINUTES_PER_DAY)
    end_minute: int = Field(gt=0, le=MINUTES_PER_DAY)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def validate_order(self):
        if self.start_minute >= self.end_minute:
            raise ValueError("Interval end must be strictly after its start")
        return self

    @computed_field
    @property
    def start(self) -> str:
        return format_clock(self.start_minute)

    @computed_field
    @property
    def end(self) -> str:
        return format_clock(self.end_minute)

    @property
    def length(self) -> int:
        return self.end_minute - self.start_minute


class BusySlotKind(str, Enum):
    """Where a busy interval came from."""
    TEAM_APPOINTMENT = "team_appointment"
    CLIENT_APPOINTMENT = "client_appointment"
    ACTIVITY = "activity"


class BusySlot(Interval):
    """An occupied interval tagged with its source and a display title."""
    type: BusySlotKind
    title: str = ""
    event_id: Optional[int] = Field(default=None, description="Appointment or activity id")

    completed_early: bool = Field(
        default=False,
        description="Completed appointment whose slot ends at its actual completion time"
    )
    scheduled_end_minute: Optional[int] = Field(
        default=None,
        description="Original scheduled end of a slot that completed early"
    )
    is_same_client: bool = Field(
        default=False,
        description="Team appointment with the client currently being booked"
    )

    @property
    def interval(self) -> Interval:
        return Interval(start_minute=self.start_minute, end_minute=self.end_minute)


class Timeline(BaseModel):
    """One subject's merged, ordered calendar for one date."""
    subject_id: int
    subject_kind: SubjectKind
    date: date_type
    busy_slots: List[BusySlot] = Field(default_factory=list)
    working_windows: List[Interval] = Field(
        default_factory=list,
        description="Disjoint active working windows, empty on time off"
    )
    is_time_off: bool = False
    time_off: Optional[TimeOff] = Field(default=None, description="The record that blocks the date")

    @property
    def working_hours(self) -> Optional[Interval]:
        """Envelope of the working windows, or None when the subject is not working."""
        if not self.working_windows:
            return None
        return Interval(
            start_minute=self.working_windows[0].start_minute,
            end_minute=self.working_windows[-1].end_minute
        )


class AvailableSlot(BaseModel):
    """Earliest start within a free gap that fits the requested duration."""
    start: str = Field(description="'HH:MM'")
    end: str = Field(description="'HH:MM'")
    duration_minutes: int = Field(gt=0)
    due_to_early_completion: bool = Field(
        default=False,
        description="Only free because a prior appointment completed early"
    )


class AvailabilityResult(BaseModel):
    """Free/busy answer for one subject, date and duration."""
    date: date_type
    duration_minutes: int
    available_slots: List[AvailableSlot] = Field(default_factory=list)
    busy_slots: List[BusySlot] = Field(default_factory=list)
    working_hours: Optional[Interval] = None
    time_off: bool = False

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "date": "2024-01-10",
            "duration_minutes": 60,
            "available_slots": [
                {"start": "09:00", "end": "10:00", "duration_minutes": 60},
                {"start": "11:00", "end": "12:00", "duration_minutes": 60}
            ],
            "busy_slots": [
                {"type": "team_appointment", "title": "Personal care",
                 "start_minute": 600, "end_minute": 660, "event_id": 101}
            ],
            "working_hours": {"start_minute": 540, "end_minute": 1020},
            "time_off": False
        }
    })


class ConflictType(str, Enum):
    TEAM_CONFLICT = "team_conflict"
    CLIENT_CONFLICT = "client_conflict"


class ConflictProposal(BaseModel):
    """A not-yet-saved appointment or activity to test against existing calendars."""
    team_id: Optional[int] = None
    client_id: Optional[int] = None
    date: date_type
    start_time: str = Field(description="'HH:MM', or a timestamp on the proposal date")
    duration_minutes: int
    exclude_appointment_id: Optional[int] = Field(
        default=None,
        description="Appointment being edited; never conflicts with itself"
    )


class ConflictInfo(BaseModel):
    """One existing event that overlaps a proposal."""
    type: ConflictType
    appointment_id: Optional[int] = None
    activity_id: Optional[int] = None
    title: str = ""
    start_time: str
    end_time: str
    message: str


@dataclass
class Placement:
    """Position of one event inside a visible day window, in percent."""
    event: Any
    start_minute: int
    end_minute: int
    left: float
    width: float
    lane: int = 0
    visible: bool = True


@dataclass
class DateBucket:
    """Events of one date for week/month grids."""
    date: date_type
    events: List[Any] = field(default_factory=list)


class DaySummary(BaseModel):
    """Aggregate load for a set of subjects on one date."""
    date: date_type
    subjects: int = 0
    scheduled_people: int = 0
    appointment_count: int = 0
    scheduled_hours: float = 0.0
    working_hours: float = 0.0
    utilization: float = Field(default=0.0, description="Busy share of working time, 0-100")
    load: str = "Rest"
