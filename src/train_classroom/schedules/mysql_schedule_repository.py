from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, tzinfo
from typing import Iterator, Optional, Sequence

from ..common.time_range import TimeRange
from ..core.enums import ScheduleStatus, ScheduleType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    dump_json,
    fetchall,
    fetchone,
    from_db_datetime,
    load_json,
    to_db_datetime,
    transaction,
)
from .model import Booking, ScheduleRemark
from .repository import ScheduleRepository

_COLUMNS = """
    schedule_id, classroom_id, teacher_id, schedule_type, status, start_time, end_time,
    course_content, expected_students, actual_students, history
"""


def _optional_int(value) -> Optional[int]:
    return int(value) if value is not None else None


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, tz: Optional[tzinfo] = None):
        self._conn_factory = conn_factory
        self._tz = tz

    def _dt(self, value: datetime) -> datetime:
        return from_db_datetime(value, self._tz)

    def _remark_to_dict(self, remark: ScheduleRemark) -> dict:
        data = {
            "recorded_at": to_db_datetime(remark.recorded_at, self._tz).isoformat(),
            "new_status": remark.new_status.value,
            "old_status": remark.old_status.value if remark.old_status else None,
            "reason": remark.reason,
        }
        if remark.previous_range is not None:
            data["previous_start"] = to_db_datetime(remark.previous_range.start, self._tz).isoformat()
            data["previous_end"] = to_db_datetime(remark.previous_range.end, self._tz).isoformat()
        return data

    def _remark_from_dict(self, data: dict) -> ScheduleRemark:
        previous = None
        if data.get("previous_start") and data.get("previous_end"):
            previous = TimeRange(
                self._dt(datetime.fromisoformat(data["previous_start"])),
                self._dt(datetime.fromisoformat(data["previous_end"])),
            )
        return ScheduleRemark(
            recorded_at=self._dt(datetime.fromisoformat(data["recorded_at"])),
            new_status=ScheduleStatus(data["new_status"]),
            reason=data.get("reason"),
            old_status=ScheduleStatus(data["old_status"]) if data.get("old_status") else None,
            previous_range=previous,
        )

    def _row_to_booking(self, r: dict) -> Booking:
        history = load_json(r.get("history")) or []
        return Booking(
            schedule_id=int(r["schedule_id"]),
            classroom_id=int(r["classroom_id"]),
            teacher_id=str(r["teacher_id"]),
            time_range=TimeRange(self._dt(r["start_time"]), self._dt(r["end_time"])),
            schedule_type=ScheduleType(r["schedule_type"]),
            status=ScheduleStatus(r["status"]),
            course_content=r.get("course_content"),
            expected_students=_optional_int(r.get("expected_students")),
            actual_students=_optional_int(r.get("actual_students")),
            history=tuple(self._remark_from_dict(h) for h in history),
        )

    def _values(self, booking: Booking) -> tuple:
        return (
            int(booking.classroom_id),
            booking.teacher_id,
            booking.schedule_type.value,
            booking.status.value,
            booking.schedule_date,
            to_db_datetime(booking.start, self._tz),
            to_db_datetime(booking.end, self._tz),
            booking.course_content,
            booking.expected_students,
            booking.actual_students,
            dump_json([self._remark_to_dict(h) for h in booking.history]),
            booking.remark_text(),
        )

    def get_by_id(self, schedule_id: int) -> Optional[Booking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classroom_schedules WHERE schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return self._row_to_booking(r) if r else None

    def list_for_classroom(self, classroom_id: int) -> Sequence[Booking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM classroom_schedules
                WHERE classroom_id=%s
                ORDER BY start_time ASC
                """,
                (int(classroom_id),),
            )
            return [self._row_to_booking(r) for r in fetchall(cur)]

    def list_in_range(
        self,
        *,
        start_date: date,
        end_date: date,
        classroom_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[Booking]:
        clauses = ["schedule_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if classroom_ids:
            placeholders = ",".join(["%s"] * len(classroom_ids))
            clauses.append(f"classroom_id IN ({placeholders})")
            params.extend(int(c) for c in classroom_ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM classroom_schedules
                WHERE {where}
                ORDER BY start_time ASC, schedule_id ASC
                """,
                tuple(params),
            )
            return [self._row_to_booking(r) for r in fetchall(cur)]

    def list_by_status(
        self,
        status: ScheduleStatus,
        *,
        limit: int,
        started_before: Optional[datetime] = None,
        ended_before: Optional[datetime] = None,
        ends_after: Optional[datetime] = None,
    ) -> Sequence[Booking]:
        clauses = ["status=%s"]
        params: list[object] = [ScheduleStatus(status).value]
        if started_before is not None:
            clauses.append("start_time <= %s")
            params.append(to_db_datetime(started_before, self._tz))
        if ended_before is not None:
            clauses.append("end_time <= %s")
            params.append(to_db_datetime(ended_before, self._tz))
        if ends_after is not None:
            clauses.append("end_time > %s")
            params.append(to_db_datetime(ends_after, self._tz))
        params.append(int(limit))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM classroom_schedules
                WHERE {where}
                ORDER BY start_time ASC
                LIMIT %s
                """,
                tuple(params),
            )
            return [self._row_to_booking(r) for r in fetchall(cur)]

    def add(self, booking: Booking) -> Booking:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO classroom_schedules(
                    classroom_id, teacher_id, schedule_type, status, schedule_date, start_time, end_time,
                    course_content, expected_students, actual_students, history, remark
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                self._values(booking),
            )
            return replace(booking, schedule_id=int(cur.lastrowid))

    def save(self, booking: Booking) -> Booking:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE classroom_schedules
                SET classroom_id=%s, teacher_id=%s, schedule_type=%s, status=%s, schedule_date=%s,
                    start_time=%s, end_time=%s, course_content=%s, expected_students=%s,
                    actual_students=%s, history=%s, remark=%s
                WHERE schedule_id=%s
                """,
                self._values(booking) + (int(booking.schedule_id),),
            )
            return booking

    @contextmanager
    def classroom_guard(self, classroom_id: int) -> Iterator[None]:
        # The classroom row lock serializes writers; reads inside share the transaction.
        with transaction(self._conn_factory) as conn:
            cur = conn.cursor()
            try:
                cur.execute("SELECT classroom_id FROM classrooms WHERE classroom_id=%s FOR UPDATE", (int(classroom_id),))
                cur.fetchall()
            finally:
                cur.close()
            yield
