from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.exceptions import InvalidRange


@dataclass(frozen=True)
class TimeRange:
    """Half-open interval [start, end) of wall-clock time.

    Two ranges touching at a boundary (one ends exactly when the other starts)
    do not overlap.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidRange(
                f"Start time must be earlier than end time ({self.start:%Y-%m-%d %H:%M:%S} >= {self.end:%Y-%m-%d %H:%M:%S})"
            )

    def overlaps(self, other: "TimeRange") -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def hours(self) -> float:
        return self.duration.total_seconds() / 3600

    @property
    def minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)

    def describe(self) -> str:
        return f"{self.start:%Y-%m-%d %H:%M:%S} - {self.end:%Y-%m-%d %H:%M:%S}"
