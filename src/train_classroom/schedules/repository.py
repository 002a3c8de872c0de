from __future__ import annotations

from datetime import date, datetime
from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import ScheduleStatus
from .model import Booking


class ScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: int) -> Optional[Booking]:
        raise NotImplementedError

    def list_for_classroom(self, classroom_id: int) -> Sequence[Booking]:
        raise NotImplementedError

    def list_in_range(
        self,
        *,
        start_date: date,
        end_date: date,
        classroom_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[Booking]:
        """Bookings whose start date falls in [start_date, end_date], ordered by start."""

        raise NotImplementedError

    def list_by_status(
        self,
        status: ScheduleStatus,
        *,
        limit: int,
        started_before: Optional[datetime] = None,
        ended_before: Optional[datetime] = None,
        ends_after: Optional[datetime] = None,
    ) -> Sequence[Booking]:
        """Up to `limit` bookings in `status`, oldest first.

        Filters are applied before the limit: start <= started_before,
        end <= ended_before, end > ends_after.
        """

        raise NotImplementedError

    def add(self, booking: Booking) -> Booking:
        """Persist a new booking and return it with its schedule_id assigned."""

        raise NotImplementedError

    def save(self, booking: Booking) -> Booking:
        raise NotImplementedError

    def classroom_guard(self, classroom_id: int) -> ContextManager[None]:
        """Serialize conflict-check-then-write for one classroom.

        Everything executed inside the block must observe and commit a consistent
        view of the classroom's bookings (row lock / transaction).
        """

        raise NotImplementedError
