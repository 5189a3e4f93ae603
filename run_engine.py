"""
Demo driver for the Scheduling & Availability Engine.

Loads a calendar snapshot (a cached JSON file, or the built-in sample agency),
runs every engine operation for one date and prints a report. The calendar
payload is exported as JSON for a frontend to render.
"""

import argparse
import json
import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional

from generators.sample_data import SampleAgency
from models import (
    Activity, Appointment, ConflictProposal, NEMTOccurrence, Subject, SubjectKind,
    parse_events, split_events
)
from scheduler import EngineSettings, ScheduleContext, SchedulingEngine, VisibleWindow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("Main")

# --- CONFIGURATION ---
DEFAULT_WINDOW = VisibleWindow(first_hour=7, last_hour=19)
DEFAULT_DURATION = 60
# ---------------------


def save_snapshot(data: Dict[str, list], filename: str) -> None:
    """Helper to save a snapshot so a run can be reproduced later."""
    serializable = {key: [item.model_dump(mode='json') for item in val] for key, val in data.items()}
    with open(filename, 'w') as f:
        json.dump(serializable, f, indent=2)
    logger.info(f"Saved snapshot to {filename}")


def load_snapshot(filename: str) -> Optional[Dict[str, list]]:
    """
    Helper to load JSON data and reconstruct pydantic objects.
    """
    try:
        with open(filename, 'r') as f:
            data = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.warning(f"Snapshot {filename} not found or invalid ({e}). Falling back to sample data.")
        return None

    # Calendar exports may carry one mixed 'events' list tagged by 'kind'
    mixed_appointments, mixed_activities = split_events(parse_events(data.get('events', [])))

    snapshot = {
        "subjects": [Subject(**item) for item in data.get('subjects', [])],
        "appointments": [Appointment(**item) for item in data.get('appointments', [])] + mixed_appointments,
        "activities": [Activity(**item) for item in data.get('activities', [])] + mixed_activities,
        "occurrences": [NEMTOccurrence(**item) for item in data.get('occurrences', [])],
    }
    logger.info(
        f"Snapshot loaded: {len(snapshot['subjects'])} subjects, "
        f"{len(snapshot['appointments'])} appointments."
    )
    return snapshot


def export_calendar_data(engine: SchedulingEngine, target: date, filename: str) -> None:
    """
    Serializes day-view placements and availability into JSON for the frontend.
    """
    data: Dict[str, Any] = {"date": target.isoformat(), "rows": []}

    for subject in engine.subjects_of(SubjectKind.TEAM):
        timeline = engine.compute_timeline(SubjectKind.TEAM, subject.id, target)
        placements = engine.place_on_grid(SubjectKind.TEAM, subject.id, target, DEFAULT_WINDOW)
        data["rows"].append({
            "subject_id": subject.id,
            "name": subject.name,
            "is_time_off": timeline.is_time_off,
            "working_windows": [w.model_dump(mode='json') for w in timeline.working_windows],
            "events": [
                {
                    "kind": p.event.kind,
                    "id": p.event.id,
                    "title": p.event.display_title,
                    "left": round(p.left, 2),
                    "width": round(p.width, 2),
                    "lane": p.lane,
                    "visible": p.visible,
                }
                for p in placements
            ],
        })

    with open(filename, 'w') as f:
        json.dump(data, f, indent=2)
    logger.info(f"Calendar data exported to {filename}")


def main():
    parser = argparse.ArgumentParser(description="Run the scheduling engine over a calendar snapshot")
    parser.add_argument("--date", type=date.fromisoformat, required=True, help="Date to report on (YYYY-MM-DD)")
    parser.add_argument("--snapshot", help="JSON snapshot to load instead of the sample agency")
    parser.add_argument("--settings", help="JSON file with EngineSettings")
    parser.add_argument("--timezone", default="UTC")
    parser.add_argument("--save-snapshot", help="Write the snapshot used to this file")
    parser.add_argument("--export", help="Write day-view calendar JSON to this file")
    args = parser.parse_args()

    target = args.date
    settings = EngineSettings.from_file(args.settings) if args.settings else EngineSettings()
    settings.context = ScheduleContext(timezone=args.timezone, today=target)

    # --- PHASE 1: DATA ACQUISITION (Snapshot vs. Sample) ---
    snapshot = load_snapshot(args.snapshot) if args.snapshot else None
    if snapshot is None:
        snapshot = SampleAgency(target).build()
    if args.save_snapshot:
        save_snapshot(snapshot, args.save_snapshot)

    engine = SchedulingEngine(settings=settings, **snapshot)

    # --- PHASE 2: CALENDARS & AVAILABILITY ---
    print("\n" + "=" * 50)
    print(f"SCHEDULE REPORT FOR {target.isoformat()}")
    print("=" * 50)

    for subject in engine.subjects_of(SubjectKind.TEAM):
        availability = engine.compute_availability(SubjectKind.TEAM, subject.id, target, DEFAULT_DURATION)
        print(f"\n{subject.name} (team {subject.id})")
        if availability.time_off:
            print("   On time off")
        elif availability.working_hours is None:
            print("   Not working")
        else:
            print(f"   Working {availability.working_hours.start}-{availability.working_hours.end}")
        for slot in availability.busy_slots:
            print(f"   busy  {slot.start}-{slot.end} {slot.type.value}: {slot.title}")
        for slot in availability.available_slots:
            note = " (freed up)" if slot.due_to_early_completion else ""
            print(f"   free  {slot.start}-{slot.end}{note}")

    # --- PHASE 3: SAMPLE CONFLICT CHECK ---
    team = engine.subjects_of(SubjectKind.TEAM)
    clients = engine.subjects_of(SubjectKind.CLIENT)
    if team and clients:
        proposal = ConflictProposal(
            team_id=team[0].id, client_id=clients[0].id,
            date=target, start_time="09:30", duration_minutes=DEFAULT_DURATION
        )
        conflicts = engine.check_conflicts(proposal)
        print(f"\nProposal {proposal.start_time} for team {proposal.team_id} / client {proposal.client_id}:")
        for conflict in conflicts or []:
            print(f"   {conflict.type.value}: {conflict.message}")
        if not conflicts:
            print("   No conflicts")

    # --- PHASE 4: NEMT MATCHING ---
    result = engine.match_nemt(target, target + timedelta(days=1))
    print(f"\nNEMT: matched {result.matched_count} appointment(s)")
    for pair in result.pairs:
        print(f"   appointment {pair.appointment_id} -> occurrence {pair.occurrence_id} ({pair.difference_minutes:+d} min)")
    for miss in result.unmatched:
        print(f"   appointment {miss.appointment_id} unmatched: {miss.reason.value}")

    summary = engine.summarize_day(SubjectKind.TEAM, target)
    print(f"\nTeam load: {summary.load}, {summary.scheduled_hours}h booked, {summary.utilization}% utilised")

    # --- PHASE 5: EXPORT FOR FRONTEND ---
    if args.export:
        export_calendar_data(engine, target, args.export)


if __name__ == "__main__":
    main()
