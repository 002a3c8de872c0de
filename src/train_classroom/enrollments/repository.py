from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Course, Enrollment


class EnrollmentRepository(Protocol):
    def get_by_id(self, enrollment_id: int) -> Optional[Enrollment]:
        raise NotImplementedError

    def get_course(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

    def list_for_course(self, course_id: int) -> Sequence[Enrollment]:
        raise NotImplementedError
