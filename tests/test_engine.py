"""
End-to-end tests of the engine facade over the sample agency snapshot.
"""

import json
import threading
from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from generators import SampleAgency
from models import Activity, ConflictProposal, ConflictType, SubjectKind, UnmatchedReason, parse_events
from run_engine import export_calendar_data, load_snapshot, save_snapshot
from scheduler import (
    EngineSettings, ScheduleContext, SchedulingEngine, UnknownSubjectError, VisibleWindow
)

ANCHOR = date(2024, 1, 10)


@pytest.fixture
def snapshot():
    return SampleAgency(ANCHOR).build()


@pytest.fixture
def engine(snapshot):
    settings = EngineSettings(context=ScheduleContext(today=ANCHOR))
    return SchedulingEngine(settings=settings, **snapshot)


def slot_times(result):
    return [(s.start, s.end, s.due_to_early_completion) for s in result.available_slots]


def test_subject_lookup(engine):
    assert [s.id for s in engine.subjects_of(SubjectKind.TEAM)] == [5, 6, 7]
    assert [s.id for s in engine.subjects_of("client")] == [3, 9, 12]
    assert engine.get_subject("team", 5).name == "Sarah Jones"


def test_unknown_subject(engine):
    with pytest.raises(UnknownSubjectError):
        engine.get_subject(SubjectKind.TEAM, 99)
    # Team and client ids live in separate namespaces
    with pytest.raises(KeyError):
        engine.get_subject(SubjectKind.CLIENT, 5)


def test_availability_with_early_completion(engine):
    result = engine.compute_availability(SubjectKind.TEAM, 5, ANCHOR, 60)

    assert slot_times(result) == [("11:15", "12:15", True), ("15:00", "16:00", False)]
    assert (result.working_hours.start, result.working_hours.end) == ("09:00", "17:00")


def test_availability_over_a_split_shift(engine):
    result = engine.compute_availability(SubjectKind.TEAM, 6, ANCHOR, 60)

    assert [(s.start, s.end) for s in result.available_slots] == [
        ("07:00", "08:00"), ("09:30", "10:30"), ("14:00", "15:00"), ("16:30", "17:30")
    ]


def test_split_shift_only_applies_on_its_date(engine):
    result = engine.compute_availability(SubjectKind.TEAM, 6, ANCHOR + timedelta(days=1), 480)
    assert [(s.start, s.end) for s in result.available_slots] == [("09:00", "17:00")]


def test_availability_on_time_off(engine):
    result = engine.compute_availability(SubjectKind.TEAM, 7, ANCHOR, 60)

    assert result.time_off is True
    assert result.available_slots == []


def test_availability_for_a_specific_client(engine):
    result = engine.compute_availability(SubjectKind.TEAM, 5, ANCHOR, 60, client_id=9)

    assert slot_times(result) == [("11:15", "12:15", True), ("15:00", "16:00", False)]
    same_client = [s.title for s in result.busy_slots if s.is_same_client]
    assert same_client == ["Meal preparation"]
    # Client 9's visit with another team member now blocks the morning
    assert "Morning routine" in [s.title for s in result.busy_slots]


def test_conflict_check(engine):
    proposal = ConflictProposal(team_id=5, client_id=3, date=ANCHOR, start_time="09:30", duration_minutes=60)

    conflicts = engine.check_conflicts(proposal)

    assert [(c.type, c.title) for c in conflicts] == [
        (ConflictType.TEAM_CONFLICT, "Personal care"),
        (ConflictType.CLIENT_CONFLICT, "Personal care"),
    ]


def test_free_slot_has_no_conflicts(engine):
    slot = engine.compute_availability(SubjectKind.TEAM, 5, ANCHOR, 60).available_slots[-1]
    proposal = ConflictProposal(team_id=5, date=ANCHOR, start_time=slot.start, duration_minutes=60)

    assert engine.check_conflicts(proposal) == []


def test_nemt_matching(engine):
    result = engine.match_nemt(ANCHOR, ANCHOR + timedelta(days=1))

    assert result.matched_count == 3
    assert [(m.reason, m.nearest_difference_minutes) for m in result.unmatched] == [
        (UnmatchedReason.OUTSIDE_TOLERANCE, -330)
    ]
    assert all(abs(p.difference_minutes) <= 120 for p in result.pairs)


def test_concurrent_nemt_passes_agree(engine):
    results = []

    def run():
        results.append(engine.match_nemt(ANCHOR, ANCHOR + timedelta(days=1)))

    threads = [threading.Thread(target=run) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 4
    assert all(r == results[0] for r in results)


def test_day_placement(engine):
    placements = engine.place_on_grid(SubjectKind.TEAM, 5, ANCHOR, VisibleWindow(first_hour=8, last_hour=19))

    assert [p.event.display_title for p in placements] == [
        "Personal care", "Meal preparation", "CPR refresher", "Medication reminder"
    ]
    assert all(p.visible for p in placements)
    lefts = [p.left for p in placements]
    assert lefts == sorted(lefts)


def test_day_placement_skips_malformed_and_cancelled(engine):
    placements = engine.place_on_grid(SubjectKind.TEAM, 6, ANCHOR)
    assert [p.event.display_title for p in placements] == ["Morning routine", "Admin", "Community outing"]


def test_client_row_places_open_ended_visit(engine):
    placements = engine.place_on_grid(SubjectKind.CLIENT, 9, ANCHOR)

    open_shift = next(p for p in placements if p.event.display_title == "Open shift")
    assert open_shift.end_minute - open_shift.start_minute == 60


def test_week_grid(engine):
    buckets = engine.week_grid(SubjectKind.TEAM, 5, ANCHOR)

    assert [b.date for b in buckets][0] == date(2024, 1, 7)
    counts = {b.date: len(b.events) for b in buckets}
    assert counts[ANCHOR] == 4
    assert counts[ANCHOR + timedelta(days=1)] == 1
    assert counts[date(2024, 1, 7)] == 0


def test_month_grid(engine):
    buckets = engine.month_grid(SubjectKind.TEAM, 5, 2024, 1)

    assert buckets[0].date == date(2023, 12, 31)
    assert len(buckets) == 35
    assert sum(len(b.events) for b in buckets) == 5


def test_team_summary(engine):
    summary = engine.summarize_day(SubjectKind.TEAM, ANCHOR)

    assert summary.subjects == 3
    assert summary.scheduled_people == 2
    assert summary.appointment_count == 5
    assert summary.scheduled_hours == 5.75
    assert summary.working_hours == 18.0
    assert summary.load == "Low"


def test_settings_from_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "context": {"timezone": "Europe/London", "today": "2024-01-10"},
        "matcher": {"tolerance_minutes": 45},
        "placement": {"min_width_pct": 2.5}
    }))

    settings = EngineSettings.from_file(path)

    assert settings.context.timezone == "Europe/London"
    assert settings.matcher.tolerance_minutes == 45
    assert settings.placement.min_width_pct == 2.5
    assert settings.timeline.placeholder_minutes == 60


def test_unknown_timezone_is_rejected():
    with pytest.raises(ValueError):
        ScheduleContext(timezone="Mars/Olympus_Mons")


def test_snapshot_round_trip(snapshot, tmp_path):
    path = tmp_path / "snapshot.json"
    save_snapshot(snapshot, str(path))

    loaded = load_snapshot(str(path))

    assert {k: len(v) for k, v in loaded.items()} == {k: len(v) for k, v in snapshot.items()}
    engine = SchedulingEngine(**loaded)
    assert engine.match_nemt(ANCHOR, ANCHOR + timedelta(days=1)).matched_count == 3


def test_mixed_event_list_dispatches_on_kind(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({
        "appointments": [
            {"id": 1, "client_id": 9, "team_id": 5, "start_time": "2024-01-10 09:00", "end_time": "2024-01-10 10:00"}
        ],
        "events": [
            {"kind": "activity", "id": 2, "team_id": 5, "type": "training",
             "start_time": "2024-01-10 11:00", "end_time": "2024-01-10 12:00"},
            {"kind": "appointment", "id": 3, "client_id": 3, "team_id": 5,
             "start_time": "2024-01-10 13:00", "end_time": "2024-01-10 14:00"},
        ],
    }))

    loaded = load_snapshot(str(path))

    assert [a.id for a in loaded["appointments"]] == [1, 3]
    assert [a.id for a in loaded["activities"]] == [2]
    assert isinstance(loaded["activities"][0], Activity)


def test_unknown_event_kind_is_rejected():
    with pytest.raises(ValidationError):
        parse_events([{"kind": "meeting", "id": 4, "team_id": 5, "start_time": "2024-01-10 09:00"}])


def test_missing_snapshot_falls_back(tmp_path):
    assert load_snapshot(str(tmp_path / "missing.json")) is None


def test_export_calendar_data(engine, tmp_path):
    path = tmp_path / "calendar.json"
    export_calendar_data(engine, ANCHOR, str(path))

    data = json.loads(path.read_text())
    rows = {row["subject_id"]: row for row in data["rows"]}
    assert data["date"] == "2024-01-10"
    assert len(rows[5]["events"]) == 4
    assert rows[7]["is_time_off"] is True
    assert rows[7]["events"] == []
