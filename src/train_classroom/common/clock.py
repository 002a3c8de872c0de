from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Optional, Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    """Wall clock.

    Without a timezone it returns naive server-local time, like the rest of the
    stored timestamps; with one it returns aware times in that zone.
    """

    def __init__(self, timezone: Optional[str] = None):
        self._tz: Optional[tzinfo] = ZoneInfo(timezone) if timezone else None

    def now(self) -> datetime:
        if self._tz is None:
            return datetime.now()
        return datetime.now(self._tz)


@dataclass
class FixedClock:
    """Clock frozen at a given moment; `advance` moves it forward."""

    current: datetime

    def now(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> datetime:
        self.current = self.current + delta
        return self.current
