from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.time_range import TimeRange
from ..core.enums import ScheduleStatus, ScheduleType


@dataclass(frozen=True)
class ScheduleRemark:
    """One append-only audit entry of a booking.

    A status change carries old/new status; a postponement also carries the
    range the booking occupied before it moved. A creation note has no old status.
    """

    recorded_at: datetime
    new_status: ScheduleStatus
    reason: Optional[str] = None
    old_status: Optional[ScheduleStatus] = None
    previous_range: Optional[TimeRange] = None

    def render(self) -> str:
        stamp = self.recorded_at.strftime("%Y-%m-%d %H:%M:%S")
        if self.previous_range is not None:
            return f"[{stamp}] Postponed: original time {self.previous_range.describe()}, reason: {self.reason}"
        if self.old_status is None:
            return f"[{stamp}] Note: {self.reason}"
        return f"[{stamp}] Status change: {self.old_status.value} -> {self.new_status.value}, reason: {self.reason}"


@dataclass(frozen=True)
class Booking:
    """Domain entity: one time reservation of a classroom (ClassroomSchedule)."""

    schedule_id: Optional[int]
    classroom_id: int
    teacher_id: str
    time_range: TimeRange
    schedule_type: ScheduleType
    status: ScheduleStatus = ScheduleStatus.SCHEDULED
    course_content: Optional[str] = None
    expected_students: Optional[int] = None
    actual_students: Optional[int] = None
    history: tuple[ScheduleRemark, ...] = ()

    @property
    def start(self) -> datetime:
        return self.time_range.start

    @property
    def end(self) -> datetime:
        return self.time_range.end

    @property
    def schedule_date(self) -> date:
        return self.time_range.start.date()

    @property
    def duration_minutes(self) -> int:
        return self.time_range.minutes

    def remark_text(self) -> Optional[str]:
        if not self.history:
            return None
        return "\n".join(entry.render() for entry in self.history)


@dataclass(frozen=True)
class BookingRequest:
    classroom_id: int
    teacher_id: str
    schedule_type: ScheduleType
    start: datetime
    end: datetime
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BatchError:
    index: int
    error: str
    data: Any


@dataclass
class BatchResult:
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[BatchError] = field(default_factory=list)
    stopped: bool = False

    @property
    def processed(self) -> int:
        return self.succeeded + self.failed + self.skipped


@dataclass(frozen=True)
class UsageStats:
    total_sessions: int
    completed_sessions: int
    cancelled_sessions: int
    total_hours: float
    available_hours: int
    utilization_rate: float
    completion_rate: float


@dataclass(frozen=True)
class StatusSweepReport:
    scheduled_to_ongoing: int
    ongoing_to_completed: int
    scheduled_to_completed: int
    dry_run: bool = False

    @property
    def total_processed(self) -> int:
        return self.scheduled_to_ongoing + self.ongoing_to_completed + self.scheduled_to_completed
