from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from ...core.enums import AttendanceType
from ..model import Anomaly, AttendanceEvent


@dataclass(frozen=True)
class DayEvents:
    """One enrollment's events of a single day, split by kind."""

    sign_ins: tuple[AttendanceEvent, ...]
    sign_outs: tuple[AttendanceEvent, ...]

    @classmethod
    def split(cls, events: Sequence[AttendanceEvent]) -> "DayEvents":
        ordered = sorted(events, key=lambda e: e.recorded_at)
        return cls(
            sign_ins=tuple(e for e in ordered if e.attendance_type == AttendanceType.SIGN_IN),
            sign_outs=tuple(e for e in ordered if e.attendance_type == AttendanceType.SIGN_OUT),
        )


class AnomalyRule(ABC):
    """Strategy Pattern: one independent check over a day's events."""

    kind: str

    @abstractmethod
    def check(self, day: DayEvents) -> Optional[Anomaly]:
        raise NotImplementedError
