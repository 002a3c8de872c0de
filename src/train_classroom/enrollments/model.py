from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Course:
    course_id: int
    title: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


@dataclass(frozen=True)
class Enrollment:
    """Domain entity: a student's registration to a course in a classroom."""

    enrollment_id: int
    student_id: int
    course: Course
    classroom_id: int
    begin_time: datetime
    end_time: Optional[datetime] = None
    finished: bool = False

    def is_active(self, now: datetime) -> bool:
        if self.finished or now < self.begin_time:
            return False
        return self.end_time is None or now <= self.end_time
