"""
Subject data models for the Scheduling & Availability Engine.

This module defines the 'Supply' side of the calendar:
1. Subjects (team members and clients whose calendars are computed)
2. Working hours (date- or weekday-keyed shifts)
3. Time off (full-day unavailability)
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator, ConfigDict
from datetime import date as date_type, time


class SubjectKind(str, Enum):
    """Which role a subject plays on an appointment."""
    TEAM = "team"
    CLIENT = "client"


class WorkingHoursWindow(BaseModel):
    """A shift during which a subject can be booked."""
    date: Optional[date_type] = Field(default=None, description="Specific calendar date this window applies to")
    day_of_week: Optional[int] = Field(
        default=None,
        ge=0,
        le=6,
        description="0=Monday, 6=Sunday. Used when no date-keyed window exists."
    )
    start_time: time = Field(description="Shift start")
    end_time: time = Field(description="Shift end")
    is_active: bool = Field(default=True, description="Inactive windows are ignored")

    @model_validator(mode='after')
    def validate_window(self):
        if (self.date is None) == (self.day_of_week is None):
            raise ValueError("Exactly one of 'date' or 'day_of_week' must be provided")
        if self.start_time >= self.end_time:
            raise ValueError("End time must be strictly after start time")
        return self

    def applies_to(self, target: date_type) -> bool:
        if self.date is not None:
            return self.date == target
        return self.day_of_week == target.weekday()

    @property
    def start_minute(self) -> int:
        return self.start_time.hour * 60 + self.start_time.minute

    @property
    def end_minute(self) -> int:
        return self.end_time.hour * 60 + self.end_time.minute


class TimeOff(BaseModel):
    """Full-day unavailability. Suppresses working hours for every date in range."""
    type: str = Field(min_length=1, description="Free-text reason (Vacation, Sick, ...)")
    start_date: date_type
    end_date: date_type

    @model_validator(mode='before')
    @classmethod
    def expand_single_date(cls, data):
        # A record may carry a single 'date' instead of a range
        if isinstance(data, dict) and "date" in data and "start_date" not in data:
            data = dict(data)
            single = data.pop("date")
            data["start_date"] = single
            data.setdefault("end_date", single)
        return data

    @model_validator(mode='after')
    def validate_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("Time off end date cannot be before start date")
        return self

    def covers(self, target: date_type) -> bool:
        return self.start_date <= target <= self.end_date


class Subject(BaseModel):
    """
    A team member or a client whose calendar is being computed.
    """
    id: int = Field(description="Identifier, unique within its kind")
    kind: SubjectKind = Field(description="Team member or client")
    name: str = Field(default="", description="Display name")

    working_hours: List[WorkingHoursWindow] = Field(
        default_factory=list,
        description="Date-keyed overrides and weekly template windows"
    )
    time_off: List[TimeOff] = Field(
        default_factory=list,
        description="Approved time off (vacation, sick leave, ...)"
    )

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "id": 5,
            "kind": "team",
            "name": "Sarah Jones",
            "working_hours": [
                {"day_of_week": 2, "start_time": "09:00:00", "end_time": "17:00:00"}
            ],
            "time_off": [
                {"type": "Vacation", "start_date": "2024-01-15", "end_date": "2024-01-19"}
            ]
        }
    })

    @property
    def is_team(self) -> bool:
        return self.kind == SubjectKind.TEAM
