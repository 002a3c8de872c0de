from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceType
from .model import AttendanceEvent


class AttendanceRepository(Protocol):
    def list_for_enrollment(
        self,
        enrollment_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        attendance_type: Optional[AttendanceType] = None,
    ) -> Sequence[AttendanceEvent]:
        """Events of one enrollment, optionally limited to [start, end] and one type, ordered by time."""

        raise NotImplementedError

    def add(self, event: AttendanceEvent) -> AttendanceEvent:
        """Append an event; returns it with record_id assigned. Events are never updated."""

        raise NotImplementedError
