from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

from ..common.clock import Clock, SystemClock
from ..common.datetime_utils import day_bounds
from .model import Anomaly, AttendanceEvent
from .repository import AttendanceRepository
from .rules.base import AnomalyRule, DayEvents
from .rules.multiple import MultipleSignInRule, MultipleSignOutRule
from .rules.ordering import SignOutBeforeSignInRule, SignOutWithoutSignInRule

DEFAULT_RULES: tuple[AnomalyRule, ...] = (
    MultipleSignInRule(),
    MultipleSignOutRule(),
    SignOutWithoutSignInRule(),
    SignOutBeforeSignInRule(),
)


class AnomalyDetector:
    """Reports inconsistent attendance sequences of one enrollment on one day.

    Rules are independent: a day may report several anomalies at once.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        clock: Clock | None = None,
        rules: Sequence[AnomalyRule] = DEFAULT_RULES,
    ):
        self._attendance = attendance
        self._clock = clock or SystemClock()
        self._rules = tuple(rules)

    def inspect(self, events: Sequence[AttendanceEvent]) -> list[Anomaly]:
        day = DayEvents.split(events)
        return [a for a in (rule.check(day) for rule in self._rules) if a is not None]

    def detect(self, enrollment_id: int, day: Optional[date] = None) -> list[Anomaly]:
        now = self._clock.now()
        moment = now if day is None else datetime.combine(day, time(12, 0), tzinfo=now.tzinfo)
        start_of_day, end_of_day = day_bounds(moment)

        events = self._attendance.list_for_enrollment(int(enrollment_id), start=start_of_day, end=end_of_day)
        return self.inspect(events)
