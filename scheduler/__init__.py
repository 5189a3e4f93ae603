"""
Scheduling & Availability Engine.

Pure, synchronous computations over an in-memory snapshot:
- Interval utilities (intervals.py)
- Event source normalizer (timeline.py)
- Grid placement (placement.py)
- Availability calculation (availability.py)
- Conflict detection (constraints.py)
- NEMT matching (nemt.py, state.py)
- Day summaries (summary.py)
- Snapshot facade (engine.py)
"""

from .config import (
    EngineSettings,
    MatcherConfig,
    PlacementPolicy,
    ScheduleContext,
    TimelineConfig
)
from .errors import (
    InvalidDurationError,
    MissingSubjectError,
    ParseError,
    SchedulingError,
    UnknownSubjectError
)
from .intervals import (
    clamp,
    complement,
    merge_intervals,
    minutes_to_clock,
    overlaps,
    parse_clock,
    parse_date,
    parse_timestamp,
    to_minutes
)
from .timeline import compute_timeline
from .placement import (
    VisibleWindow,
    assign_lanes,
    current_week,
    group_by_date,
    month_dates,
    place_on_grid,
    position,
    week_dates
)
from .availability import compute_availability
from .constraints import ConflictChecker, check_conflicts
from .nemt import NemtMatcher, match_nemt
from .summary import summarize_day
from .engine import SchedulingEngine

__all__ = [
    "EngineSettings",
    "MatcherConfig",
    "PlacementPolicy",
    "ScheduleContext",
    "TimelineConfig",
    "InvalidDurationError",
    "MissingSubjectError",
    "ParseError",
    "SchedulingError",
    "UnknownSubjectError",
    "clamp",
    "complement",
    "merge_intervals",
    "minutes_to_clock",
    "overlaps",
    "parse_clock",
    "parse_date",
    "parse_timestamp",
    "to_minutes",
    "compute_timeline",
    "VisibleWindow",
    "assign_lanes",
    "current_week",
    "group_by_date",
    "month_dates",
    "place_on_grid",
    "position",
    "week_dates",
    "compute_availability",
    "ConflictChecker",
    "check_conflicts",
    "NemtMatcher",
    "match_nemt",
    "summarize_day",
    "SchedulingEngine",
]
