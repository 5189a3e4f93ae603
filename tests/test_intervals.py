"""
Tests for interval utilities: parsing, overlap, clamping, merge and complement.
"""

from datetime import date, datetime, time

import pytest

from models import Interval
from scheduler import (
    ParseError, ScheduleContext, clamp, complement, merge_intervals,
    minutes_to_clock, overlaps, parse_date, parse_timestamp, to_minutes
)


def iv(start, end):
    return Interval(start_minute=start, end_minute=end)


def covered(intervals):
    minutes = set()
    for i in intervals:
        minutes.update(range(i.start_minute, i.end_minute))
    return minutes


@pytest.mark.parametrize("value,expected", [
    ("09:30", 570),
    ("00:00", 0),
    ("17:45:59", 1065),
    ("24:00", 1440),
    ("2024-01-10 14:05", 845),
    ("2024-01-10 14:05:30", 845),
    ("2024-01-10T08:15:00", 495),
    (time(6, 20), 380),
    (datetime(2024, 1, 10, 23, 59), 1439),
])
def test_to_minutes(value, expected):
    assert to_minutes(value) == expected


@pytest.mark.parametrize("value", ["25:00", "9h30", "", "12:60", "abc", None, 42, "2024-13-45 10:00"])
def test_to_minutes_rejects_malformed_input(value):
    with pytest.raises(ParseError):
        to_minutes(value)


def test_parse_error_is_a_value_error():
    with pytest.raises(ValueError):
        parse_timestamp("yesterday-ish")


def test_offset_timestamps_are_read_in_context_timezone():
    context = ScheduleContext(timezone="America/New_York")
    parsed = parse_timestamp("2024-01-10T14:00:00Z", context)

    assert parsed == datetime(2024, 1, 10, 9, 0)
    assert parsed.tzinfo is None
    assert to_minutes("2024-01-10T14:00:00+00:00", context) == 540


def test_naive_timestamps_are_wall_time():
    context = ScheduleContext(timezone="Asia/Tokyo")
    assert parse_timestamp("2024-01-10 09:00", context) == datetime(2024, 1, 10, 9, 0)


def test_offset_can_move_the_date():
    context = ScheduleContext(timezone="America/Los_Angeles")
    assert parse_timestamp("2024-01-10T03:00:00Z", context).date() == date(2024, 1, 9)


@pytest.mark.parametrize("value,expected", [
    ("2024-01-10", date(2024, 1, 10)),
    ("2024-01-10 09:00", date(2024, 1, 10)),
    (date(2024, 2, 29), date(2024, 2, 29)),
    (datetime(2024, 3, 1, 12, 0), date(2024, 3, 1)),
])
def test_parse_date(value, expected):
    assert parse_date(value) == expected


@pytest.mark.parametrize("value", ["2024-02-30", "10/01/2024", "", None])
def test_parse_date_rejects_malformed_input(value):
    with pytest.raises(ParseError):
        parse_date(value)


def test_minutes_to_clock():
    assert minutes_to_clock(0) == "00:00"
    assert minutes_to_clock(545) == "09:05"
    assert minutes_to_clock(1440) == "24:00"


@pytest.mark.parametrize("a,b,expected", [
    ((540, 600), (570, 630), True),
    ((540, 600), (600, 660), False),   # touching
    ((540, 600), (480, 540), False),   # touching on the other side
    ((540, 720), (600, 630), True),    # containment
    ((540, 600), (700, 760), False),
])
def test_overlaps_is_symmetric(a, b, expected):
    first, second = iv(*a), iv(*b)
    assert overlaps(first, second) is expected
    assert overlaps(second, first) is expected


def test_interval_overlaps_itself():
    for start, end in [(0, 1), (540, 600), (1439, 1440)]:
        assert overlaps(iv(start, end), iv(start, end))


def test_interval_rejects_empty_or_reversed():
    with pytest.raises(ValueError):
        iv(600, 600)
    with pytest.raises(ValueError):
        iv(600, 540)
    with pytest.raises(ValueError):
        iv(0, 1441)


def test_clamp():
    assert clamp(iv(420, 600), 480, 1200) == iv(480, 600)
    assert clamp(iv(540, 600), 480, 1200) == iv(540, 600)
    assert clamp(iv(1100, 1300), 480, 1200) == iv(1100, 1200)
    assert clamp(iv(420, 450), 480, 1200) is None
    assert clamp(iv(420, 480), 480, 1200) is None


def test_merge_joins_overlapping_and_touching():
    merged = merge_intervals([iv(900, 960), iv(600, 660), iv(650, 700), iv(700, 720), iv(1000, 1010)])
    assert merged == [iv(600, 720), iv(900, 960), iv(1000, 1010)]


def test_merge_of_nothing_is_empty():
    assert merge_intervals([]) == []


def test_complement_within_window():
    window = iv(540, 1020)
    free = complement([iv(600, 660), iv(650, 700), iv(900, 960)], window)
    assert free == [iv(540, 600), iv(700, 900), iv(960, 1020)]


def test_complement_ignores_busy_outside_window():
    window = iv(540, 1020)
    assert complement([iv(400, 500), iv(1100, 1200)], window) == [window]
    assert complement([iv(400, 600)], window) == [iv(600, 1020)]
    assert complement([iv(500, 1100)], window) == []


@pytest.mark.parametrize("busy", [
    [],
    [(600, 660)],
    [(540, 600), (600, 660)],
    [(600, 700), (650, 750), (900, 1020)],
    [(540, 1020)],
    [(541, 542), (700, 701), (1019, 1020)],
])
def test_free_and_busy_partition_the_window(busy):
    window = iv(540, 1020)
    merged = merge_intervals(iv(*b) for b in busy)
    free = complement(merged, window)

    assert covered(free) | covered(merged) == covered([window])
    assert covered(free) & covered(merged) == set()
