from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ..schedules.model import Booking


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidRange(ValidationError):
    """Raised when a time range does not start strictly before it ends."""


class ConflictError(DomainError):
    """Raised when a candidate booking overlaps live bookings of the classroom."""

    def __init__(self, message: str, conflicts: Sequence["Booking"] = ()):
        super().__init__(message)
        self.conflicts = list(conflicts)


class NotFoundError(DomainError):
    """Raised when a referenced identifier does not resolve."""


class ResourceNotFound(NotFoundError):
    pass


class ScheduleNotFound(NotFoundError):
    pass


class EnrollmentNotFound(NotFoundError):
    pass


class CourseNotFound(NotFoundError):
    pass


class AttendanceRejected(DomainError):
    """Raised when the validator declines an attendance event.

    `reason` is one of the codes in `attendance.validator` (e.g. `duplicate_same_day`).
    """

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason
