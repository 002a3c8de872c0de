from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence

from ..classrooms.repository import ClassroomRepository
from ..common.clock import Clock, SystemClock
from ..common.datetime_utils import align_to, parse_iso_datetime
from ..common.logging import get_logger
from ..common.validators import optional_text, require_non_empty
from ..core.constants import MAKEUP_REMARK_PREFIX
from ..core.enums import AttendanceMethod, AttendanceType, VerificationResult
from ..core.exceptions import AttendanceRejected, DomainError, EnrollmentNotFound, ResourceNotFound, ValidationError
from ..devices.manager import AttendanceDeviceManager
from ..devices.verifier import ManualVerifier
from ..enrollments.model import Enrollment
from ..enrollments.repository import EnrollmentRepository
from ..schedules.model import BatchError, BatchResult
from .anomalies import AnomalyDetector
from .model import Anomaly, AttendanceEvent, AttendanceSummary, CourseSummary
from .repository import AttendanceRepository
from .statistics import AttendanceStatistics
from .validator import AdmissionDecision, AttendanceValidator

log = get_logger(__name__)


def _device_field(device_data: Mapping[str, Any], key: str) -> Optional[str]:
    value = device_data.get(key)
    return str(value) if value is not None else None


class AttendanceService:
    """Attendance operations exposed to controllers, admin tools and import jobs."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        enrollments: EnrollmentRepository,
        classrooms: ClassroomRepository,
        *,
        clock: Clock | None = None,
        device_manager: AttendanceDeviceManager | None = None,
    ):
        self._attendance = attendance
        self._enrollments = enrollments
        self._classrooms = classrooms
        self._clock = clock or SystemClock()
        self._devices = device_manager or AttendanceDeviceManager([ManualVerifier()])
        self._validator = AttendanceValidator(attendance, clock=self._clock)
        self._detector = AnomalyDetector(attendance, clock=self._clock)
        self._statistics = AttendanceStatistics(attendance, enrollments)

    def get_enrollment(self, enrollment_id: int) -> Enrollment:
        enrollment = self._enrollments.get_by_id(int(enrollment_id))
        if not enrollment:
            raise EnrollmentNotFound(f"Enrollment {enrollment_id} does not exist")
        return enrollment

    def validate(
        self,
        enrollment_id: int,
        attendance_type: AttendanceType,
        at: Optional[datetime] = None,
    ) -> AdmissionDecision:
        return self._validator.decide(self.get_enrollment(enrollment_id), AttendanceType(attendance_type), at)

    def record(
        self,
        enrollment_id: int,
        attendance_type: AttendanceType,
        method: AttendanceMethod,
        *,
        device_data: Optional[Mapping[str, Any]] = None,
        remark: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> AttendanceEvent:
        """Admit and store one attendance event.

        A failed device verification is still stored, with the failing outcome;
        only a validator rejection prevents the event from being created.
        """
        enrollment = self.get_enrollment(enrollment_id)
        attendance_type = AttendanceType(attendance_type)
        method = AttendanceMethod(method)
        now = self._clock.now()
        at = align_to(at, now) if at is not None else now

        decision = self._validator.decide(enrollment, attendance_type, at)
        if not decision.accepted:
            raise AttendanceRejected(decision.message or "Attendance rejected", decision.reason or "rejected")

        classroom = self._classrooms.get_by_id(enrollment.classroom_id)
        if not classroom:
            raise ResourceNotFound(f"Classroom {enrollment.classroom_id} does not exist")

        device_data = dict(device_data or {})
        outcome = self._devices.verify(classroom, method, device_data)

        event = self._attendance.add(
            AttendanceEvent(
                record_id=None,
                enrollment_id=enrollment.enrollment_id,
                attendance_type=attendance_type,
                method=method,
                recorded_at=at,
                verification_result=outcome.result,
                device_data=device_data or None,
                device_id=_device_field(device_data, "device_id"),
                device_location=_device_field(device_data, "location"),
                latitude=_device_field(device_data, "latitude"),
                longitude=_device_field(device_data, "longitude"),
                remark=remark,
            )
        )

        log.info(
            "attendance_recorded",
            record_id=event.record_id,
            enrollment_id=enrollment.enrollment_id,
            type=attendance_type.value,
            method=method.value,
            result=outcome.result.value,
        )
        if not outcome.success:
            log.warning(
                "attendance_verification_not_successful",
                record_id=event.record_id,
                result=outcome.result.value,
                message=outcome.message,
            )
        return event

    def record_make_up(
        self,
        enrollment_id: int,
        attendance_type: AttendanceType,
        recorded_at: datetime,
        reason: str,
    ) -> AttendanceEvent:
        """Backdated manual entry; skips the once-per-day check on purpose."""
        enrollment = self.get_enrollment(enrollment_id)
        reason = require_non_empty(reason, "reason")
        recorded_at = align_to(recorded_at, self._clock.now())

        event = self._attendance.add(
            AttendanceEvent(
                record_id=None,
                enrollment_id=enrollment.enrollment_id,
                attendance_type=AttendanceType(attendance_type),
                method=AttendanceMethod.MANUAL,
                recorded_at=recorded_at,
                verification_result=VerificationResult.SUCCESS,
                remark=f"{MAKEUP_REMARK_PREFIX}{reason}",
            )
        )

        log.info(
            "attendance_make_up_recorded",
            record_id=event.record_id,
            enrollment_id=enrollment.enrollment_id,
            type=event.attendance_type.value,
            record_time=f"{recorded_at:%Y-%m-%d %H:%M:%S}",
            reason=reason,
        )
        return event

    def batch_import(self, rows: Sequence[Mapping[str, Any]]) -> BatchResult:
        """Record rows one by one; a bad row is reported and the rest continue."""
        result = BatchResult()
        for index, row in enumerate(rows):
            try:
                try:
                    enrollment_id = int(row.get("enrollment_id", row.get("registration_id")))
                except (TypeError, ValueError):
                    raise ValidationError("enrollment_id has an invalid format")
                try:
                    attendance_type = AttendanceType(str(row.get("type")))
                    method = AttendanceMethod(str(row.get("method")))
                except ValueError:
                    raise ValidationError("Unknown attendance type or method")
                device_data = row.get("device_data") or {}
                if not isinstance(device_data, Mapping):
                    raise ValidationError("device_data must be a mapping")
                at = row.get("recorded_at")

                self.record(
                    enrollment_id,
                    attendance_type,
                    method,
                    device_data=device_data,
                    remark=optional_text(row.get("remark"), "remark"),
                    at=parse_iso_datetime(at, "recorded_at") if at is not None else None,
                )
                result.succeeded += 1
            except DomainError as e:
                result.failed += 1
                result.errors.append(BatchError(index=index, error=str(e), data=row))

        log.info("attendance_import_finished", total=len(rows), succeeded=result.succeeded, failed=result.failed)
        return result

    def statistics(self, enrollment_id: int) -> AttendanceSummary:
        return self._statistics.for_enrollment(self.get_enrollment(enrollment_id))

    def course_summary(
        self,
        course_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> CourseSummary:
        return self._statistics.for_course(course_id, start_date, end_date)

    def rate_statistics(
        self,
        course_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[dict]:
        summary = self._statistics.for_course(course_id, start_date, end_date)
        return [
            {
                "enrollment_id": d.enrollment_id,
                "total_records": d.total_records,
                "sign_in_count": d.sign_in_count,
                "sign_out_count": d.sign_out_count,
                "unique_days": d.unique_days,
                "attendance_rate": d.attendance_rate,
            }
            for d in summary.student_details
        ]

    def anomalies(self, enrollment_id: int, day: Optional[date] = None) -> list[Anomaly]:
        enrollment = self.get_enrollment(enrollment_id)
        return self._detector.detect(enrollment.enrollment_id, day)
