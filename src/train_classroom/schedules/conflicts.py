from __future__ import annotations

from typing import Iterable, Optional

from ..common.time_range import TimeRange
from .model import Booking
from .repository import ScheduleRepository
from .state_machine import blocks_slot


def overlapping(
    bookings: Iterable[Booking],
    candidate: TimeRange,
    *,
    classroom_id: int,
    exclude_schedule_id: Optional[int] = None,
) -> list[Booking]:
    """Bookings that keep their slot and overlap `candidate` on the same classroom.

    Cancelled and completed bookings never conflict.
    """
    out: list[Booking] = []
    for b in bookings:
        if b.classroom_id != classroom_id:
            continue
        if exclude_schedule_id is not None and b.schedule_id == exclude_schedule_id:
            continue
        if not blocks_slot(b.status):
            continue
        if b.time_range.overlaps(candidate):
            out.append(b)
    out.sort(key=lambda b: b.start)
    return out


class ScheduleConflictEngine:
    """Finds existing bookings of a classroom that overlap a candidate range. Read-only."""

    def __init__(self, schedules: ScheduleRepository):
        self._schedules = schedules

    def find_conflicts(
        self,
        classroom_id: int,
        candidate: TimeRange,
        exclude_schedule_id: Optional[int] = None,
    ) -> list[Booking]:
        existing = self._schedules.list_for_classroom(int(classroom_id))
        return overlapping(
            existing,
            candidate,
            classroom_id=int(classroom_id),
            exclude_schedule_id=exclude_schedule_id,
        )
