from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..core.enums import AttendanceMethod, AttendanceType, VerificationResult


@dataclass(frozen=True)
class AttendanceEvent:
    """Domain entity: one timestamped attendance claim (append-only)."""

    record_id: Optional[int]
    enrollment_id: int
    attendance_type: AttendanceType
    method: AttendanceMethod
    recorded_at: datetime
    verification_result: VerificationResult = VerificationResult.SUCCESS
    is_valid: bool = True
    device_data: Optional[Mapping[str, Any]] = None
    device_id: Optional[str] = None
    device_location: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    remark: Optional[str] = None

    @property
    def is_successful(self) -> bool:
        return self.verification_result == VerificationResult.SUCCESS and self.is_valid

    @property
    def day(self) -> date:
        return self.recorded_at.date()


@dataclass(frozen=True)
class Anomaly:
    kind: str
    message: str
    records: tuple[AttendanceEvent, ...] = ()
    sign_in_time: Optional[datetime] = None
    sign_out_time: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceSummary:
    """Per-enrollment tallies used by reports."""

    enrollment_id: int
    total_records: int
    sign_in_count: int
    sign_out_count: int
    break_out_count: int
    break_in_count: int
    attendance_days: tuple[date, ...]
    attendance_rate: float

    @property
    def unique_days(self) -> int:
        return len(self.attendance_days)


@dataclass(frozen=True)
class CourseSummary:
    course_id: int
    start_date: Optional[date]
    end_date: Optional[date]
    total_students: int
    total_attendance_records: int
    average_attendance_rate: float
    student_details: tuple[AttendanceSummary, ...] = field(default_factory=tuple)
