from __future__ import annotations

from typing import Optional

from ..model import Anomaly
from .base import AnomalyRule, DayEvents


class MultipleSignInRule(AnomalyRule):
    """More than one sign-in on the same day."""

    kind = "multiple_sign_in"

    def check(self, day: DayEvents) -> Optional[Anomaly]:
        if len(day.sign_ins) <= 1:
            return None
        return Anomaly(kind=self.kind, message="Multiple sign-in records on the same day", records=day.sign_ins)


class MultipleSignOutRule(AnomalyRule):
    """More than one sign-out on the same day."""

    kind = "multiple_sign_out"

    def check(self, day: DayEvents) -> Optional[Anomaly]:
        if len(day.sign_outs) <= 1:
            return None
        return Anomaly(kind=self.kind, message="Multiple sign-out records on the same day", records=day.sign_outs)
