"""
Engine configuration.

Every tunable the engine uses lives here as a pydantic model with defaults,
so callers can build it in code or load it from a JSON file.
"""

import json
from datetime import date as date_type
from pathlib import Path
from typing import List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from models import AppointmentStatus


class ScheduleContext(BaseModel):
    """
    Explicit clock and timezone.
    The engine never reads wall-clock time; 'today' is only what the caller says.
    """
    timezone: str = Field(default="UTC", description="IANA zone used to read timestamps")
    today: Optional[date_type] = Field(default=None, description="Caller's notion of the current date")

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone '{v}'")
        return v

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class TimelineConfig(BaseModel):
    """How raw events become busy slots."""
    ignored_statuses: List[AppointmentStatus] = Field(
        default_factory=lambda: [AppointmentStatus.CANCELLED, AppointmentStatus.DELETED],
        description="Appointments in these states occupy no time"
    )
    placeholder_minutes: int = Field(
        default=60,
        ge=1,
        description="Length drawn for an event without end_time (placement only)"
    )


class PlacementPolicy(BaseModel):
    """Rendering heuristics applied on top of the placement math."""
    min_width_pct: float = Field(default=5.0, ge=0.0, le=100.0)
    stack_lanes: bool = Field(default=True, description="Greedy first-fit lanes for overlapping events")


class MatcherConfig(BaseModel):
    """NEMT matching parameters."""
    tolerance_minutes: int = Field(default=120, ge=0)
    eligible_statuses: List[AppointmentStatus] = Field(
        default_factory=lambda: [
            AppointmentStatus.SCHEDULED,
            AppointmentStatus.UNASSIGNED,
            AppointmentStatus.IN_PROGRESS,
            AppointmentStatus.LATE,
        ]
    )


class EngineSettings(BaseModel):
    context: ScheduleContext = Field(default_factory=ScheduleContext)
    timeline: TimelineConfig = Field(default_factory=TimelineConfig)
    placement: PlacementPolicy = Field(default_factory=PlacementPolicy)
    matcher: MatcherConfig = Field(default_factory=MatcherConfig)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "EngineSettings":
        with open(path, 'r') as f:
            return cls(**json.load(f))
