"""
Interval utilities.

Date/time parsing, minute-of-day arithmetic and overlap tests. Everything
here is pure; malformed input raises ParseError.
"""

from datetime import date as date_type, datetime, time as time_type
from typing import Iterable, List, Optional, Union

from models import Interval, MINUTES_PER_DAY, format_clock
from .config import ScheduleContext
from .errors import ParseError

TimeLike = Union[str, datetime, time_type]

minutes_to_clock = format_clock


def parse_timestamp(value: Union[str, datetime], context: Optional[ScheduleContext] = None) -> datetime:
    """
    Parse a full timestamp into naive wall time of the context timezone.

    Accepts 'YYYY-MM-DD HH:MM[:SS]' and ISO-8601 (with or without offset).
    Offset-aware values are converted into the context zone first.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ParseError(value) from None
    else:
        raise ParseError(value)

    if parsed.tzinfo is not None:
        context = context or ScheduleContext()
        parsed = parsed.astimezone(context.tz).replace(tzinfo=None)
    return parsed


def parse_clock(value: Union[str, time_type]) -> int:
    """'HH:MM' or 'HH:MM:SS' to minute of day. '24:00' is end of day."""
    if isinstance(value, time_type):
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        raise ParseError(value, "clock time")

    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ParseError(value, "clock time")

    hours, minutes = int(parts[0]), int(parts[1])
    seconds = int(parts[2]) if len(parts) == 3 else 0
    if hours == 24 and minutes == 0 and seconds == 0:
        return MINUTES_PER_DAY
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ParseError(value, "clock time")
    return hours * 60 + minutes


def parse_date(value: Union[str, date_type, datetime]) -> date_type:
    """Date object, datetime, or 'YYYY-MM-DD' (a timestamp keeps its date portion)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date_type):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            if len(text) == 10:
                return date_type.fromisoformat(text)
            return datetime.fromisoformat(text).date()
        except ValueError:
            raise ParseError(value, "date") from None
    raise ParseError(value, "date")


def looks_like_timestamp(text: str) -> bool:
    return "-" in text[:10] and len(text) > 10


def to_minutes(value: TimeLike, context: Optional[ScheduleContext] = None) -> int:
    """Minute of day for a clock string, time, timestamp string or datetime."""
    if isinstance(value, datetime):
        ts = parse_timestamp(value, context)
        return ts.hour * 60 + ts.minute
    if isinstance(value, str) and looks_like_timestamp(value.strip()):
        ts = parse_timestamp(value, context)
        return ts.hour * 60 + ts.minute
    return parse_clock(value)


def overlaps(a: Interval, b: Interval) -> bool:
    """Strict overlap; touching endpoints do not count."""
    return a.start_minute < b.end_minute and b.start_minute < a.end_minute


def clamp(interval: Interval, window_start: int, window_end: int) -> Optional[Interval]:
    """Intersection with [window_start, window_end), or None if disjoint."""
    start = max(interval.start_minute, window_start)
    end = min(interval.end_minute, window_end)
    if start >= end:
        return None
    return Interval(start_minute=start, end_minute=end)


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Minimal disjoint cover. Overlapping and touching intervals are joined."""
    ordered = sorted(intervals, key=lambda i: (i.start_minute, i.end_minute))
    merged: List[List[int]] = []

    for item in ordered:
        if merged and item.start_minute <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], item.end_minute)
        else:
            merged.append([item.start_minute, item.end_minute])

    return [Interval(start_minute=s, end_minute=e) for s, e in merged]


def complement(busy: Iterable[Interval], window: Interval) -> List[Interval]:
    """Free intervals of the window not covered by any busy interval."""
    free = []
    cursor = window.start_minute

    for block in merge_intervals(busy):
        clipped = clamp(block, window.start_minute, window.end_minute)
        if clipped is None:
            continue
        if clipped.start_minute > cursor:
            free.append(Interval(start_minute=cursor, end_minute=clipped.start_minute))
        cursor = max(cursor, clipped.end_minute)

    if cursor < window.end_minute:
        free.append(Interval(start_minute=cursor, end_minute=window.end_minute))
    return free
