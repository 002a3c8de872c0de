from __future__ import annotations

from typing import Optional

from ..model import Anomaly
from .base import AnomalyRule, DayEvents


class SignOutWithoutSignInRule(AnomalyRule):
    kind = "sign_out_without_sign_in"

    def check(self, day: DayEvents) -> Optional[Anomaly]:
        if not day.sign_outs or day.sign_ins:
            return None
        return Anomaly(kind=self.kind, message="Sign-out recorded without any sign-in", records=day.sign_outs)


class SignOutBeforeSignInRule(AnomalyRule):
    """Earliest sign-out earlier than the latest sign-in."""

    kind = "sign_out_before_sign_in"

    def check(self, day: DayEvents) -> Optional[Anomaly]:
        if not day.sign_ins or not day.sign_outs:
            return None

        latest_sign_in = max(e.recorded_at for e in day.sign_ins)
        earliest_sign_out = min(e.recorded_at for e in day.sign_outs)
        if earliest_sign_out >= latest_sign_in:
            return None

        return Anomaly(
            kind=self.kind,
            message="Sign-out time is earlier than sign-in time",
            sign_in_time=latest_sign_in,
            sign_out_time=earliest_sign_out,
        )
