"""
Deterministic sample agency data for the demo driver.

Builds one week of calendars around an anchor date: a few team members with
weekday shifts (one on vacation), their clients, appointments, staff
activities and transportation pickups, including a couple of records that
should be skipped or left unmatched.
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List

from models import (
    Activity, Appointment, AppointmentStatus, NEMTOccurrence,
    Subject, SubjectKind, TimeOff, WorkingHoursWindow
)

logger = logging.getLogger(__name__)

TEAM = [
    (5, "Sarah Jones"),
    (6, "Marcus Lee"),
    (7, "Priya Patel"),
]

CLIENTS = [
    (3, "Helen Brooks"),
    (9, "Tom Alvarez"),
    (12, "Ruth Chen"),
]


class SampleAgency:
    def __init__(self, anchor: date):
        self.anchor = anchor
        self._next_id = 100

    def _id(self) -> int:
        self._next_id += 1
        return self._next_id

    def _ts(self, day: date, clock: str) -> str:
        return f"{day.isoformat()} {clock}"

    def subjects(self) -> List[Subject]:
        weekday_shift = [
            WorkingHoursWindow(day_of_week=d, start_time="09:00", end_time="17:00")
            for d in range(5)
        ]
        team = [
            Subject(id=tid, kind=SubjectKind.TEAM, name=name, working_hours=list(weekday_shift))
            for tid, name in TEAM
        ]
        # Split shift override on the anchor date
        team[1].working_hours.append(
            WorkingHoursWindow(date=self.anchor, start_time="07:00", end_time="11:00")
        )
        team[1].working_hours.append(
            WorkingHoursWindow(date=self.anchor, start_time="13:00", end_time="19:00")
        )
        team[2].time_off.append(
            TimeOff(type="Vacation", start_date=self.anchor, end_date=self.anchor + timedelta(days=2))
        )

        clients = [
            Subject(
                id=cid, kind=SubjectKind.CLIENT, name=name,
                working_hours=[
                    WorkingHoursWindow(day_of_week=d, start_time="08:00", end_time="20:00")
                    for d in range(7)
                ]
            )
            for cid, name in CLIENTS
        ]
        return team + clients

    def appointments(self) -> List[Appointment]:
        day = self.anchor
        rows = [
            (3, 5, "09:00", "10:00", AppointmentStatus.SCHEDULED, "Personal care", None),
            (9, 5, "10:30", "12:00", AppointmentStatus.COMPLETED, "Meal preparation", "11:15"),
            (12, 5, "14:00", "15:00", AppointmentStatus.SCHEDULED, "Medication reminder", None),
            (9, 6, "08:00", "09:30", AppointmentStatus.CONFIRMED, "Morning routine", None),
            (3, 6, "15:00", "16:30", AppointmentStatus.UNASSIGNED, "Community outing", None),
            (12, 6, "16:00", "17:00", AppointmentStatus.CANCELLED, "Cancelled visit", None),
            (9, None, "13:00", None, AppointmentStatus.UNASSIGNED, "Open shift", None),
        ]
        appointments = []
        for client_id, team_id, start, end, status, title, completed in rows:
            appointments.append(Appointment(
                id=self._id(),
                client_id=client_id,
                team_id=team_id,
                title=title,
                start_time=self._ts(day, start),
                end_time=self._ts(day, end) if end else None,
                status=status,
                completed_at=self._ts(day, completed) if completed else None
            ))

        # Next day, plus one malformed record the normalizer must skip
        tomorrow = day + timedelta(days=1)
        appointments.append(Appointment(
            id=self._id(), client_id=3, team_id=5, title="Personal care",
            start_time=self._ts(tomorrow, "09:00"), end_time=self._ts(tomorrow, "10:00")
        ))
        appointments.append(Appointment(
            id=self._id(), client_id=12, team_id=6, title="Bad import row",
            start_time="not-a-timestamp", end_time=None
        ))
        return appointments

    def activities(self) -> List[Activity]:
        day = self.anchor
        return [
            Activity(id=self._id(), team_id=5, type="training", title="CPR refresher",
                     start_time=self._ts(day, "12:30"), end_time=self._ts(day, "13:30")),
            Activity(id=self._id(), team_id=6, type="admin",
                     start_time=self._ts(day, "13:00"), end_time=self._ts(day, "14:00")),
        ]

    def occurrences(self) -> List[NEMTOccurrence]:
        day = self.anchor
        return [
            NEMTOccurrence(id=self._id(), client_id=3, transportation_date=day,
                           pickup_window_start="08:30", pickup_window_end="09:00"),
            NEMTOccurrence(id=self._id(), client_id=3, transportation_date=day,
                           pickup_window_start="14:30", pickup_window_end="15:00"),
            NEMTOccurrence(id=self._id(), client_id=9, transportation_date=day,
                           confirmed_pickup_time="12:45"),
            NEMTOccurrence(id=self._id(), client_id=12, transportation_date=day,
                           pickup_window_start="19:30", pickup_window_end="20:00"),
            NEMTOccurrence(id=self._id(), client_id=9, transportation_date=day,
                           pickup_window_start="07:30", is_cancelled=True),
        ]

    def build(self) -> Dict[str, Any]:
        data = {
            "subjects": self.subjects(),
            "appointments": self.appointments(),
            "activities": self.activities(),
            "occurrences": self.occurrences(),
        }
        logger.info(
            f"Sample agency for {self.anchor}: {len(data['subjects'])} subjects, "
            f"{len(data['appointments'])} appointments, {len(data['occurrences'])} pickups"
        )
        return data
