"""
Pytest configuration and shared fixtures.
"""

from datetime import date

import pytest

from models import Activity, Appointment, Subject, SubjectKind, WorkingHoursWindow

# 2024-01-10 is a Wednesday
DAY = date(2024, 1, 10)
WEDNESDAY = 2


@pytest.fixture
def day():
    return DAY


@pytest.fixture
def team_member():
    """Team member 5, working 09:00-17:00 on Wednesdays."""
    return Subject(
        id=5,
        kind=SubjectKind.TEAM,
        name="Sarah Jones",
        working_hours=[WorkingHoursWindow(day_of_week=WEDNESDAY, start_time="09:00", end_time="17:00")],
    )


@pytest.fixture
def client():
    """Client 9, available all day."""
    return Subject(
        id=9,
        kind=SubjectKind.CLIENT,
        name="Tom Alvarez",
        working_hours=[WorkingHoursWindow(day_of_week=WEDNESDAY, start_time="08:00", end_time="20:00")],
    )


@pytest.fixture
def make_appointment():
    """Factory for appointments on the test day."""
    counter = {"id": 100}

    def _make(start, end, client_id=9, team_id=5, **kwargs):
        # 'HH:MM' is taken on the test day; anything longer is a full timestamp
        counter["id"] += 1
        return Appointment(
            id=kwargs.pop("id", counter["id"]),
            client_id=client_id,
            team_id=team_id,
            start_time=f"{DAY.isoformat()} {start}" if len(start) <= 5 else start,
            end_time=(f"{DAY.isoformat()} {end}" if len(end) <= 5 else end) if end else None,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_activity():
    counter = {"id": 500}

    def _make(start, end, team_id=5, **kwargs):
        counter["id"] += 1
        return Activity(
            id=kwargs.pop("id", counter["id"]),
            team_id=team_id,
            start_time=f"{DAY.isoformat()} {start}",
            end_time=f"{DAY.isoformat()} {end}",
            **kwargs,
        )

    return _make
