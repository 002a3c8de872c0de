from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.clock import Clock, SystemClock
from ..common.datetime_utils import align_to, day_bounds
from ..core.enums import AttendanceType
from ..enrollments.model import Enrollment
from .repository import AttendanceRepository

ENROLLMENT_INACTIVE = "enrollment_inactive"
OUTSIDE_COURSE_WINDOW = "outside_course_window"
DUPLICATE_SAME_DAY = "duplicate_same_day"

REJECTION_MESSAGES = {
    ENROLLMENT_INACTIVE: "Enrollment is not active",
    OUTSIDE_COURSE_WINDOW: "Attendance time is after the end of the course",
    DUPLICATE_SAME_DAY: "An attendance record of this type already exists today",
}

# At most one of these per enrollment per local day; break events are uncapped.
ONCE_PER_DAY = frozenset({AttendanceType.SIGN_IN, AttendanceType.SIGN_OUT})


@dataclass(frozen=True)
class AdmissionDecision:
    accepted: bool
    reason: Optional[str] = None

    @property
    def message(self) -> Optional[str]:
        return REJECTION_MESSAGES.get(self.reason) if self.reason else None


ACCEPTED = AdmissionDecision(accepted=True)


class AttendanceValidator:
    """Decides whether a new attendance event is admissible."""

    def __init__(self, attendance: AttendanceRepository, *, clock: Clock | None = None):
        self._attendance = attendance
        self._clock = clock or SystemClock()

    def decide(
        self,
        enrollment: Enrollment,
        attendance_type: AttendanceType,
        at: Optional[datetime] = None,
    ) -> AdmissionDecision:
        now = self._clock.now()
        at = align_to(at, now) if at is not None else now

        if not enrollment.is_active(now):
            return AdmissionDecision(accepted=False, reason=ENROLLMENT_INACTIVE)

        course_end = enrollment.course.end_time
        if course_end is not None and at > course_end:
            return AdmissionDecision(accepted=False, reason=OUTSIDE_COURSE_WINDOW)

        if attendance_type in ONCE_PER_DAY:
            start_of_day, end_of_day = day_bounds(at)
            existing = self._attendance.list_for_enrollment(
                enrollment.enrollment_id,
                start=start_of_day,
                end=end_of_day,
                attendance_type=attendance_type,
            )
            if existing:
                return AdmissionDecision(accepted=False, reason=DUPLICATE_SAME_DAY)

        return ACCEPTED

    def validate(
        self,
        enrollment: Enrollment,
        attendance_type: AttendanceType,
        at: Optional[datetime] = None,
    ) -> bool:
        return self.decide(enrollment, attendance_type, at).accepted
