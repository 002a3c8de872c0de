from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from train_classroom.common.datetime_utils import day_bounds, days_inclusive, parse_iso_datetime
from train_classroom.common.time_range import TimeRange
from train_classroom.core.exceptions import InvalidRange, ValidationError


def _r(start_hour: int, end_hour: int) -> TimeRange:
    return TimeRange(datetime(2024, 3, 4, start_hour), datetime(2024, 3, 4, end_hour))


def test_start_must_be_before_end():
    with pytest.raises(InvalidRange):
        _r(10, 10)
    with pytest.raises(InvalidRange):
        _r(11, 10)


def test_adjacent_ranges_do_not_overlap():
    assert not _r(9, 10).overlaps(_r(10, 11))
    assert not _r(10, 11).overlaps(_r(9, 10))


def test_overlap_is_symmetric():
    pairs = [(_r(9, 11), _r(10, 12)), (_r(8, 12), _r(9, 10)), (_r(9, 10), _r(13, 14))]
    for a, b in pairs:
        assert a.overlaps(b) == b.overlaps(a)
    assert _r(9, 11).overlaps(_r(10, 12))
    assert _r(8, 12).overlaps(_r(9, 10))


def test_contains_is_inclusive_at_both_ends():
    r = _r(9, 10)
    assert r.contains(datetime(2024, 3, 4, 9))
    assert r.contains(datetime(2024, 3, 4, 10))
    assert not r.contains(datetime(2024, 3, 4, 10, 0, 1))


def test_duration_helpers():
    r = TimeRange(datetime(2024, 3, 4, 9), datetime(2024, 3, 4, 10, 30))
    assert r.duration == timedelta(minutes=90)
    assert r.hours == 1.5
    assert r.minutes == 90


def test_day_bounds_keeps_timezone():
    tz = timezone(timedelta(hours=7))
    start, end = day_bounds(datetime(2024, 3, 4, 15, 30, tzinfo=tz))
    assert start == datetime(2024, 3, 4, 0, 0, tzinfo=tz)
    assert end.date() == date(2024, 3, 4)
    assert end.tzinfo is tz


def test_days_inclusive():
    assert days_inclusive(date(2024, 3, 1), date(2024, 3, 1)) == 1
    assert days_inclusive(date(2024, 3, 1), date(2024, 3, 10)) == 10


def test_parse_iso_datetime():
    assert parse_iso_datetime("2024-03-04T09:00:00", "start_time") == datetime(2024, 3, 4, 9)
    with pytest.raises(ValidationError, match="start_time"):
        parse_iso_datetime("tomorrow", "start_time")
    with pytest.raises(ValidationError):
        parse_iso_datetime(None, "end_time")
