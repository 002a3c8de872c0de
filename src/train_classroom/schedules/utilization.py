from __future__ import annotations

from datetime import date, datetime
from typing import Sequence

from ..common.datetime_utils import as_date, days_inclusive
from ..core.constants import RATE_PRECISION, WORK_HOURS_PER_DAY
from ..core.enums import ScheduleStatus
from .model import Booking, UsageStats


def percentage(part: float, whole: float) -> float:
    """part/whole as a percentage rounded to two decimals, 0 when whole <= 0."""
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, RATE_PRECISION)


class UtilizationCalculator:
    """Hours used, completion rate and utilization of a set of bookings.

    Availability model: a fixed number of usable hours per calendar day
    (8 by default), independent of the classroom.
    """

    def __init__(self, work_hours_per_day: int = WORK_HOURS_PER_DAY):
        self._work_hours_per_day = int(work_hours_per_day)

    def available_hours(self, range_start: date | datetime, range_end: date | datetime) -> int:
        return days_inclusive(as_date(range_start), as_date(range_end)) * self._work_hours_per_day

    def calculate(
        self,
        bookings: Sequence[Booking],
        range_start: date | datetime,
        range_end: date | datetime,
    ) -> UsageStats:
        total_hours = 0.0
        completed = 0
        cancelled = 0
        for b in bookings:
            total_hours += b.time_range.hours
            if b.status == ScheduleStatus.COMPLETED:
                completed += 1
            elif b.status == ScheduleStatus.CANCELLED:
                cancelled += 1

        available = self.available_hours(range_start, range_end)
        return UsageStats(
            total_sessions=len(bookings),
            completed_sessions=completed,
            cancelled_sessions=cancelled,
            total_hours=round(total_hours, RATE_PRECISION),
            available_hours=available,
            utilization_rate=percentage(total_hours, available),
            completion_rate=percentage(completed, len(bookings)),
        )
