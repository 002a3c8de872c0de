from __future__ import annotations

from collections import Counter
from datetime import date, datetime, time
from typing import Optional, Sequence

from ..common.datetime_utils import days_inclusive
from ..core.constants import RATE_PRECISION
from ..core.enums import AttendanceType
from ..core.exceptions import CourseNotFound
from ..enrollments.model import Enrollment
from ..enrollments.repository import EnrollmentRepository
from ..schedules.utilization import percentage
from .model import AttendanceEvent, AttendanceSummary, CourseSummary
from .repository import AttendanceRepository


def total_course_days(enrollment: Enrollment) -> int:
    """Calendar days of the course window, both ends included; 0 when undefined."""
    course = enrollment.course
    if course.start_time is None or course.end_time is None:
        return 0
    return max(days_inclusive(course.start_time.date(), course.end_time.date()), 0)


class AttendanceStatistics:
    """Read-side aggregation of stored attendance events."""

    def __init__(self, attendance: AttendanceRepository, enrollments: EnrollmentRepository):
        self._attendance = attendance
        self._enrollments = enrollments

    def summarize(self, enrollment: Enrollment, events: Sequence[AttendanceEvent]) -> AttendanceSummary:
        counts = Counter(e.attendance_type for e in events)
        days = tuple(sorted({e.day for e in events}))

        return AttendanceSummary(
            enrollment_id=enrollment.enrollment_id,
            total_records=len(events),
            sign_in_count=counts[AttendanceType.SIGN_IN],
            sign_out_count=counts[AttendanceType.SIGN_OUT],
            break_out_count=counts[AttendanceType.BREAK_OUT],
            break_in_count=counts[AttendanceType.BREAK_IN],
            attendance_days=days,
            attendance_rate=percentage(len(days), total_course_days(enrollment)),
        )

    def for_enrollment(self, enrollment: Enrollment) -> AttendanceSummary:
        events = self._attendance.list_for_enrollment(enrollment.enrollment_id)
        return self.summarize(enrollment, events)

    def for_course(
        self,
        course_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> CourseSummary:
        if self._enrollments.get_course(int(course_id)) is None:
            raise CourseNotFound(f"Course {course_id} does not exist")

        start = datetime.combine(start_date, time.min) if start_date else None
        end = datetime.combine(end_date, time.max) if end_date else None

        details = tuple(
            self.summarize(enrollment, self._attendance.list_for_enrollment(enrollment.enrollment_id, start=start, end=end))
            for enrollment in self._enrollments.list_for_course(int(course_id))
        )

        average = 0.0
        if details:
            average = round(sum(d.attendance_rate for d in details) / len(details), RATE_PRECISION)

        return CourseSummary(
            course_id=int(course_id),
            start_date=start_date,
            end_date=end_date,
            total_students=len(details),
            total_attendance_records=sum(d.total_records for d in details),
            average_attendance_rate=average,
            student_details=details,
        )
