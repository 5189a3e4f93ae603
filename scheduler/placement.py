"""
Grid Placement Engine.

Maps events onto calendar grids:
1. Day view: left/width percentages inside a visible hour window, plus lanes.
2. Week/month views: one bucket per date, no intra-day position.

The percentage math is independent of the rendering heuristics, which live
in PlacementPolicy (minimum width floor, lane stacking).
"""

import calendar
import logging
from datetime import date as date_type, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field, model_validator

from models import (
    Activity, Appointment, BusySlot, DateBucket, Interval, MINUTES_PER_DAY, Placement
)
from .config import PlacementPolicy, ScheduleContext, TimelineConfig
from .errors import ParseError
from .timeline import resolve_event_span

logger = logging.getLogger(__name__)

Placeable = Union[Appointment, Activity, BusySlot, Interval]

SUNDAY = 6


class VisibleWindow(BaseModel):
    """Hours shown by a day view: [first_hour, last_hour + 1)."""
    first_hour: int = Field(default=8, ge=0, le=23)
    last_hour: int = Field(default=19, ge=0, le=23)

    @model_validator(mode='after')
    def validate_hours(self):
        if self.last_hour < self.first_hour:
            raise ValueError("last_hour cannot be before first_hour")
        return self

    @property
    def start_minute(self) -> int:
        return self.first_hour * 60

    @property
    def end_minute(self) -> int:
        return (self.last_hour + 1) * 60


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def position(
    start_minute: int,
    end_minute: int,
    window: VisibleWindow,
    policy: Optional[PlacementPolicy] = None
) -> Tuple[float, float]:
    """
    (left, width) in percent of the window.
    Events outside the window collapse to a floor-width box at the nearest edge.
    """
    policy = policy or PlacementPolicy()
    w0, w1 = window.start_minute, window.end_minute
    span = w1 - w0

    left = _clamp01((start_minute - w0) / span) * 100
    end = _clamp01((end_minute - w0) / span) * 100
    width = max(policy.min_width_pct, min(end - left, 100 - left))
    return left, width


def assign_lanes(spans: Sequence[Tuple[int, int]]) -> List[int]:
    """
    Greedy first-fit lanes, aligned with the input.
    Events are visited by start time, ties by input order; each goes to the
    lowest lane whose last event ends at or before its start.
    """
    order = sorted(range(len(spans)), key=lambda i: (spans[i][0], i))
    lane_ends: List[int] = []
    lanes = [0] * len(spans)

    for i in order:
        start, end = spans[i]
        for lane, last_end in enumerate(lane_ends):
            if last_end <= start:
                lanes[i] = lane
                lane_ends[lane] = end
                break
        else:
            lanes[i] = len(lane_ends)
            lane_ends.append(end)

    return lanes


def _span(
    event: Placeable,
    context: Optional[ScheduleContext],
    placeholder_minutes: int
) -> Tuple[int, int]:
    if isinstance(event, Interval):
        return event.start_minute, event.end_minute

    _, start, end = resolve_event_span(event, context)
    if end is None:
        end = min(start + placeholder_minutes, MINUTES_PER_DAY)
    return start, end


def place_on_grid(
    events: Iterable[Placeable],
    window: VisibleWindow,
    policy: Optional[PlacementPolicy] = None,
    context: Optional[ScheduleContext] = None,
    timeline_config: Optional[TimelineConfig] = None
) -> List[Placement]:
    """
    Day-view placement for one subject row.

    Returns placements ordered by start time (ties by input order). Events
    outside the window are kept, collapsed to an edge and flagged invisible.
    """
    policy = policy or PlacementPolicy()
    placeholder = (timeline_config or TimelineConfig()).placeholder_minutes

    kept = []
    for event in events:
        try:
            kept.append((event, _span(event, context, placeholder)))
        except ParseError as e:
            logger.warning(f"Skipping {getattr(event, 'kind', 'event')} {getattr(event, 'id', '?')} in placement: {e}")

    spans = [span for _, span in kept]
    lanes = assign_lanes(spans) if policy.stack_lanes else [0] * len(spans)

    placements = []
    for (event, (start, end)), lane in zip(kept, lanes):
        left, width = position(start, end, window, policy)
        placements.append(Placement(
            event=event,
            start_minute=start,
            end_minute=end,
            left=left,
            width=width,
            lane=lane,
            visible=end > window.start_minute and start < window.end_minute
        ))

    # Stable: equal starts keep input order
    placements.sort(key=lambda p: p.start_minute)
    return placements


def group_by_date(
    events: Iterable[Union[Appointment, Activity]],
    dates: Iterable[date_type],
    context: Optional[ScheduleContext] = None
) -> List[DateBucket]:
    """Week/month placement: bucket events by the date portion of start_time."""
    buckets = {d: DateBucket(date=d) for d in dates}
    starts = {}

    for event in events:
        try:
            event_date, start, _ = resolve_event_span(event, context)
        except ParseError as e:
            logger.warning(f"Skipping {event.kind} {event.id} in date grouping: {e}")
            continue
        bucket = buckets.get(event_date)
        if bucket is not None:
            bucket.events.append(event)
            starts[id(event)] = start

    for bucket in buckets.values():
        bucket.events.sort(key=lambda e: starts[id(e)])
    return list(buckets.values())


def week_dates(anchor: date_type, week_starts_on: int = SUNDAY) -> List[date_type]:
    """The seven dates of the week containing anchor (0=Monday, 6=Sunday)."""
    start = anchor - timedelta(days=(anchor.weekday() - week_starts_on) % 7)
    return [start + timedelta(days=i) for i in range(7)]


def month_dates(year: int, month: int, week_starts_on: int = SUNDAY) -> List[date_type]:
    """Every date of the whole weeks that cover a month, as a month grid shows them."""
    return list(calendar.Calendar(firstweekday=week_starts_on).itermonthdates(year, month))


def current_week(context: ScheduleContext, week_starts_on: int = SUNDAY) -> List[date_type]:
    if context.today is None:
        raise ValueError("ScheduleContext.today is required to resolve the current week")
    return week_dates(context.today, week_starts_on)
