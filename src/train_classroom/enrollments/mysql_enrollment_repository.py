from __future__ import annotations

from datetime import tzinfo
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime
from .model import Course, Enrollment
from .repository import EnrollmentRepository

_ENROLLMENT_SELECT = """
    SELECT
        e.enrollment_id, e.student_id, e.classroom_id, e.begin_time, e.end_time, e.finished,
        c.course_id, c.title, c.start_time AS course_start, c.end_time AS course_end
    FROM enrollments e
    JOIN courses c ON c.course_id = e.course_id
"""


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, tz: Optional[tzinfo] = None):
        self._conn_factory = conn_factory
        self._tz = tz

    def _course(self, r: dict, start_key: str = "start_time", end_key: str = "end_time") -> Course:
        return Course(
            course_id=int(r["course_id"]),
            title=r["title"],
            start_time=from_db_datetime(r.get(start_key), self._tz),
            end_time=from_db_datetime(r.get(end_key), self._tz),
        )

    def _enrollment(self, r: dict) -> Enrollment:
        return Enrollment(
            enrollment_id=int(r["enrollment_id"]),
            student_id=int(r["student_id"]),
            course=self._course(r, "course_start", "course_end"),
            classroom_id=int(r["classroom_id"]),
            begin_time=from_db_datetime(r["begin_time"], self._tz),
            end_time=from_db_datetime(r.get("end_time"), self._tz),
            finished=bool(r.get("finished")),
        )

    def get_by_id(self, enrollment_id: int) -> Optional[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_ENROLLMENT_SELECT + " WHERE e.enrollment_id=%s", (int(enrollment_id),))
            r = fetchone(cur)
            return self._enrollment(r) if r else None

    def get_course(self, course_id: int) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT course_id, title, start_time, end_time FROM courses WHERE course_id=%s",
                (int(course_id),),
            )
            r = fetchone(cur)
            return self._course(r) if r else None

    def list_for_course(self, course_id: int) -> Sequence[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _ENROLLMENT_SELECT + " WHERE e.course_id=%s ORDER BY e.enrollment_id ASC",
                (int(course_id),),
            )
            return [self._enrollment(r) for r in fetchall(cur)]
