"""
Scheduled event data models for the Scheduling & Availability Engine.

Appointments and activities arrive from the API as raw records. Their
timestamps are kept as strings so that one malformed record can be skipped
by the timeline normalizer instead of failing the whole snapshot.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Tuple, Union, Literal
from pydantic import BaseModel, Field, ConfigDict, TypeAdapter


class AppointmentStatus(str, Enum):
    """Lifecycle state of an appointment."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SCHEDULED = "scheduled"
    UNASSIGNED = "unassigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    LATE = "late"
    REJECTED = "rejected"
    TERMINATED_BY_CLIENT = "terminated_by_client"
    TERMINATED_BY_STAFF = "terminated_by_staff"
    DELETED = "deleted"


class Appointment(BaseModel):
    """
    A client visit delivered by a team member.
    A null end_time is only tolerated by grid placement (1-hour placeholder).
    """
    kind: Literal["appointment"] = "appointment"

    # --- Core Identity ---
    id: int = Field(description="Appointment id")
    client_id: int = Field(description="Client receiving the service")
    team_id: Optional[int] = Field(default=None, description="Assigned team member, None while unassigned")
    speciality_id: Optional[int] = Field(default=None, description="Service speciality")
    title: Optional[str] = Field(default=None, description="Display title")

    # --- Timing ---
    start_time: str = Field(description="'YYYY-MM-DD HH:MM[:SS]' or ISO-8601 timestamp")
    end_time: Optional[str] = Field(default=None, description="Same-day end timestamp")
    completed_at: Optional[str] = Field(
        default=None,
        description="When a completed appointment actually finished"
    )

    # --- State ---
    status: AppointmentStatus = Field(default=AppointmentStatus.SCHEDULED)
    nemt_occurrence_id: Optional[int] = Field(
        default=None,
        description="Linked transportation occurrence, if already matched"
    )

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "kind": "appointment",
            "id": 101,
            "client_id": 9,
            "team_id": 5,
            "speciality_id": 2,
            "title": "Personal care",
            "start_time": "2024-01-10 09:00",
            "end_time": "2024-01-10 10:00",
            "status": "scheduled",
            "nemt_occurrence_id": None
        }
    })

    @property
    def display_title(self) -> str:
        return self.title or "Untitled Appointment"


class Activity(BaseModel):
    """Non-client staff time (training, admin, travel, ...)."""
    kind: Literal["activity"] = "activity"

    id: int = Field(description="Activity id")
    team_id: int = Field(description="Team member the activity belongs to")
    type: str = Field(default="other", description="Activity category, e.g. 'training'")
    title: str = Field(default="", description="Display title")
    start_time: str = Field(description="'YYYY-MM-DD HH:MM[:SS]' or ISO-8601 timestamp")
    end_time: Optional[str] = Field(default=None, description="Same-day end timestamp")

    @property
    def display_title(self) -> str:
        return self.title or self.type.replace("_", " ").title()


ScheduledEvent = Annotated[Union[Appointment, Activity], Field(discriminator="kind")]

_EVENT_LIST = TypeAdapter(List[ScheduledEvent])


def parse_events(payload: List[Dict[str, Any]]) -> List[Union[Appointment, Activity]]:
    """Build appointments and activities from one mixed list, dispatching on 'kind'."""
    return _EVENT_LIST.validate_python(payload)


def split_events(events: List[Union[Appointment, Activity]]) -> Tuple[List[Appointment], List[Activity]]:
    appointments = [e for e in events if e.kind == "appointment"]
    activities = [e for e in events if e.kind == "activity"]
    return appointments, activities
