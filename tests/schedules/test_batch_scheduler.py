from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from train_classroom.common.clock import FixedClock
from train_classroom.core.enums import ScheduleType
from train_classroom.core.exceptions import ValidationError
from train_classroom.schedules.batch import BatchScheduler, parse_request
from train_classroom.schedules.model import BookingRequest
from train_classroom.schedules.service import ScheduleService


def _row(start: str, end: str, **extra) -> dict:
    row = {
        "classroom_id": "1",
        "teacher_id": "T1",
        "type": "LECTURE",
        "start_time": f"2024-03-04T{start}:00",
        "end_time": f"2024-03-04T{end}:00",
    }
    row.update(extra)
    return row


def test_parse_request_accepts_course_id_alias():
    req = parse_request(
        {
            "classroom_id": " 3 ",
            "course_id": 12,
            "type": "EXAM",
            "start_time": "2024-03-04T09:00:00",
            "end_time": "2024-03-04T11:00:00",
            "options": {"expected_students": 10},
        }
    )
    assert req.classroom_id == 3
    assert req.teacher_id == "12"
    assert req.schedule_type == ScheduleType.EXAM
    assert req.options == {"expected_students": 10}


@pytest.mark.parametrize(
    "row",
    [
        {"classroom_id": "abc", "teacher_id": "T1", "type": "LECTURE"},
        {"classroom_id": "1", "teacher_id": "T1", "type": "PARTY"},
        {"classroom_id": "1", "teacher_id": "T1", "type": "LECTURE", "start_time": "soon", "end_time": "later"},
    ],
)
def test_parse_request_rejects_bad_rows(row):
    with pytest.raises(ValidationError):
        parse_request(row)


def test_conflicting_item_is_skipped(batch_scheduler):
    result = batch_scheduler.create_many([_row("09:00", "10:00"), _row("09:30", "10:30")], skip_conflicts=True)

    assert (result.succeeded, result.skipped, result.failed) == (1, 1, 0)
    assert result.errors == []


def test_conflicting_item_is_reported_and_batch_continues(batch_scheduler):
    result = batch_scheduler.create_many(
        [_row("09:00", "10:00"), _row("09:30", "10:30"), _row("10:00", "11:00")],
    )

    assert (result.succeeded, result.skipped, result.failed) == (2, 0, 1)
    assert result.errors[0].index == 1
    assert "conflicts" in result.errors[0].error
    assert result.errors[0].data["start_time"] == "2024-03-04T09:30:00"


def test_items_earlier_in_the_batch_are_visible_to_later_ones(batch_scheduler, schedules):
    batch_scheduler.create_many([_row("09:00", "10:00"), _row("09:00", "10:00")], skip_conflicts=True)
    assert len(schedules.list_for_classroom(1)) == 1


def test_missing_classroom_and_bad_range_are_failures(batch_scheduler):
    result = batch_scheduler.create_many(
        [
            _row("09:00", "10:00", classroom_id="99"),
            _row("11:00", "10:00"),
            _row("12:00", "13:00"),
        ],
        skip_conflicts=True,
    )

    assert (result.succeeded, result.skipped, result.failed) == (1, 0, 2)
    assert [e.index for e in result.errors] == [0, 1]


def test_booking_request_objects_are_accepted(batch_scheduler):
    req = BookingRequest(
        classroom_id=2,
        teacher_id="T9",
        schedule_type=ScheduleType.MEETING,
        start=datetime(2024, 3, 4, 9),
        end=datetime(2024, 3, 4, 10),
    )
    result = batch_scheduler.create_many([req, req])

    assert result.succeeded == 1
    assert result.errors[0].data["classroom_id"] == 2


def test_should_stop_ends_the_batch_early(batch_scheduler):
    calls = {"n": 0}

    def should_stop() -> bool:
        calls["n"] += 1
        return calls["n"] > 1

    result = batch_scheduler.create_many([_row("09:00", "10:00"), _row("11:00", "12:00")], should_stop=should_stop)

    assert result.stopped
    assert result.processed == 1


def test_rows_without_offset_use_the_clock_zone(schedules, classrooms):
    tz = timezone(timedelta(hours=8))
    service = ScheduleService(schedules, classrooms, clock=FixedClock(datetime(2024, 3, 4, 8, 0, tzinfo=tz)))
    service.create_booking(
        classroom_id=1,
        teacher_id="T1",
        schedule_type=ScheduleType.LECTURE,
        start=datetime(2024, 3, 4, 9, 0, tzinfo=tz),
        end=datetime(2024, 3, 4, 10, 0, tzinfo=tz),
    )

    result = BatchScheduler(service).create_many(
        [
            _row("09:30", "10:30"),
            _row("09:00", "10:00", classroom_id="2"),
            _row(
                "01:30",
                "02:30",
                classroom_id="2",
                start_time="2024-03-04T01:30:00+00:00",
                end_time="2024-03-04T02:30:00+00:00",
            ),
        ]
    )

    assert result.succeeded == 1
    assert result.failed == 2
    assert [e.index for e in result.errors] == [0, 2]
    stored = schedules.list_for_classroom(2)
    assert [b.start for b in stored] == [datetime(2024, 3, 4, 9, 0, tzinfo=tz)]
