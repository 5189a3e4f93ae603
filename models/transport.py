"""
Non-Emergency Medical Transportation (NEMT) models.
"""

from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from datetime import date as date_type, time as time_type


class NEMTOccurrence(BaseModel):
    """One concrete transportation pickup for a client on a date."""
    id: int
    client_id: int
    transportation_date: date_type
    pickup_window_start: Optional[time_type] = Field(default=None, description="Earliest pickup")
    pickup_window_end: Optional[time_type] = Field(default=None, description="Latest pickup")
    confirmed_pickup_time: Optional[time_type] = Field(
        default=None,
        description="Broker-confirmed time, used when no pickup window is known"
    )
    is_cancelled: bool = False

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "id": 77,
            "client_id": 9,
            "transportation_date": "2024-01-10",
            "pickup_window_start": "13:30:00",
            "pickup_window_end": "14:00:00",
            "is_cancelled": False
        }
    })

    @property
    def pickup_time(self) -> Optional[time_type]:
        return self.pickup_window_start or self.confirmed_pickup_time


class NemtPair(BaseModel):
    appointment_id: int
    occurrence_id: int
    difference_minutes: int = Field(description="Appointment start minus pickup, signed")


class UnmatchedReason(str, Enum):
    NO_OCCURRENCE_FOR_CLIENT = "no_occurrence_for_client"
    OUTSIDE_TOLERANCE = "outside_tolerance"
    ALREADY_CLAIMED = "already_claimed"


class UnmatchedAppointment(BaseModel):
    appointment_id: int
    reason: UnmatchedReason
    nearest_difference_minutes: Optional[int] = None


class NemtMatchResult(BaseModel):
    """Outcome of one matching pass over a date range."""
    start_date: date_type
    end_date: date_type
    matched_count: int = 0
    pairs: List[NemtPair] = Field(default_factory=list)
    unmatched: List[UnmatchedAppointment] = Field(default_factory=list)
