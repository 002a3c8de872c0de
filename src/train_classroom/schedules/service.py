from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..classrooms.model import Classroom
from ..classrooms.repository import ClassroomRepository
from ..common.clock import Clock, SystemClock
from ..common.datetime_utils import align_to
from ..common.logging import get_logger
from ..common.time_range import TimeRange
from ..common.validators import optional_count, optional_text, require_non_empty
from ..core.constants import DEFAULT_SWEEP_BATCH_SIZE
from ..core.enums import ScheduleStatus, ScheduleType
from ..core.exceptions import ConflictError, ResourceNotFound, ScheduleNotFound
from .conflicts import ScheduleConflictEngine
from .model import Booking, ScheduleRemark, StatusSweepReport, UsageStats
from .repository import ScheduleRepository
from .state_machine import ScheduleStateMachine, blocks_slot
from .utilization import UtilizationCalculator

log = get_logger(__name__)


class ScheduleService:
    """Booking operations exposed to controllers, admin tools and import jobs."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        classrooms: ClassroomRepository,
        *,
        clock: Clock | None = None,
        state_machine: ScheduleStateMachine | None = None,
        calculator: UtilizationCalculator | None = None,
    ):
        self._schedules = schedules
        self._classrooms = classrooms
        self._clock = clock or SystemClock()
        self._machine = state_machine or ScheduleStateMachine()
        self._calculator = calculator or UtilizationCalculator()
        self._conflicts = ScheduleConflictEngine(schedules)

    def _range(self, start: datetime, end: datetime) -> TimeRange:
        # Naive input is wall-clock time in the clock's zone.
        now = self._clock.now()
        return TimeRange(align_to(start, now), align_to(end, now))

    # -- lookups ---------------------------------------------------------

    def get_classroom(self, classroom_id: int) -> Classroom:
        classroom = self._classrooms.get_by_id(int(classroom_id))
        if not classroom:
            raise ResourceNotFound(f"Classroom {classroom_id} does not exist")
        return classroom

    def get_booking(self, schedule_id: int) -> Booking:
        booking = self._schedules.get_by_id(int(schedule_id))
        if not booking:
            raise ScheduleNotFound(f"Schedule {schedule_id} does not exist")
        return booking

    def find_conflicts(
        self,
        classroom_id: int,
        start: datetime,
        end: datetime,
        exclude_schedule_id: Optional[int] = None,
    ) -> list[Booking]:
        return self._conflicts.find_conflicts(classroom_id, self._range(start, end), exclude_schedule_id)

    # -- mutations -------------------------------------------------------

    def create_booking(
        self,
        *,
        classroom_id: int,
        teacher_id: str,
        schedule_type: ScheduleType,
        start: datetime,
        end: datetime,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Booking:
        classroom = self.get_classroom(classroom_id)
        time_range = self._range(start, end)
        options = dict(options or {})

        history: tuple[ScheduleRemark, ...] = ()
        remark = optional_text(options.get("remark"), "remark")
        if remark:
            history = (ScheduleRemark(recorded_at=self._clock.now(), new_status=ScheduleStatus.SCHEDULED, reason=remark),)

        candidate = Booking(
            schedule_id=None,
            classroom_id=classroom.classroom_id,
            teacher_id=require_non_empty(str(teacher_id), "teacher_id"),
            time_range=time_range,
            schedule_type=ScheduleType(schedule_type),
            status=ScheduleStatus.SCHEDULED,
            course_content=optional_text(options.get("course_content"), "course_content"),
            expected_students=optional_count(options.get("expected_students"), "expected_students"),
            history=history,
        )

        with self._schedules.classroom_guard(classroom.classroom_id):
            conflicts = self._conflicts.find_conflicts(classroom.classroom_id, time_range)
            if conflicts:
                raise ConflictError(
                    f"Schedule time conflicts with {len(conflicts)} existing schedule(s)",
                    conflicts,
                )
            booking = self._schedules.add(candidate)

        log.info(
            "schedule_created",
            schedule_id=booking.schedule_id,
            classroom_id=booking.classroom_id,
            teacher_id=booking.teacher_id,
            type=booking.schedule_type.value,
            start_time=f"{start:%Y-%m-%d %H:%M:%S}",
            end_time=f"{end:%Y-%m-%d %H:%M:%S}",
        )
        return booking

    def update_status(self, schedule_id: int, status: ScheduleStatus, reason: Optional[str] = None) -> Booking:
        """Relabel a booking.

        Bringing a booking back into a slot-holding status (e.g. a cancelled one
        re-scheduled) re-runs the conflict check, since its slot may be taken.
        """
        booking = self.get_booking(schedule_id)
        status = ScheduleStatus(status)

        with self._schedules.classroom_guard(booking.classroom_id):
            booking = self.get_booking(schedule_id)
            if blocks_slot(status) and not blocks_slot(booking.status):
                conflicts = self._conflicts.find_conflicts(
                    booking.classroom_id, booking.time_range, exclude_schedule_id=booking.schedule_id
                )
                if conflicts:
                    raise ConflictError("Schedule time is no longer free", conflicts)
            updated = self._schedules.save(
                self._machine.transition(booking, status, now=self._clock.now(), reason=reason)
            )

        log.info(
            "schedule_status_updated",
            schedule_id=updated.schedule_id,
            old_status=booking.status.value,
            new_status=updated.status.value,
            reason=reason,
        )
        return updated

    def cancel(self, schedule_id: int, reason: str) -> Booking:
        return self.update_status(schedule_id, ScheduleStatus.CANCELLED, require_non_empty(reason, "reason"))

    def postpone(self, schedule_id: int, *, start: datetime, end: datetime, reason: str) -> Booking:
        new_range = self._range(start, end)
        reason = require_non_empty(reason, "reason")
        booking = self.get_booking(schedule_id)

        with self._schedules.classroom_guard(booking.classroom_id):
            booking = self.get_booking(schedule_id)
            conflicts = self._conflicts.find_conflicts(
                booking.classroom_id, new_range, exclude_schedule_id=booking.schedule_id
            )
            if conflicts:
                raise ConflictError("New schedule time conflicts with existing schedules", conflicts)
            updated = self._schedules.save(
                self._machine.reschedule(booking, new_range, now=self._clock.now(), reason=reason)
            )

        log.info(
            "schedule_postponed",
            schedule_id=updated.schedule_id,
            original_start=f"{booking.start:%Y-%m-%d %H:%M:%S}",
            original_end=f"{booking.end:%Y-%m-%d %H:%M:%S}",
            new_start=f"{start:%Y-%m-%d %H:%M:%S}",
            new_end=f"{end:%Y-%m-%d %H:%M:%S}",
            reason=reason,
        )
        return updated

    def record_actual_students(self, schedule_id: int, actual_students: int) -> Booking:
        booking = self.get_booking(schedule_id)
        count = optional_count(actual_students, "actual_students")
        return self._schedules.save(replace(booking, actual_students=count))

    def can_be_cancelled(self, schedule_id: int) -> bool:
        return self._machine.can_be_cancelled(self.get_booking(schedule_id), now=self._clock.now())

    def advance_statuses(
        self,
        *,
        batch_size: int = DEFAULT_SWEEP_BATCH_SIZE,
        dry_run: bool = False,
    ) -> StatusSweepReport:
        """Move bookings along with the clock.

        SCHEDULED and started -> ONGOING, ONGOING and over -> COMPLETED,
        SCHEDULED and already over -> COMPLETED (a session nobody started).
        Each move re-reads the booking under its classroom guard and is dropped
        if a concurrent edit made it no longer due.
        """
        now = self._clock.now()
        to_ongoing = list(
            self._schedules.list_by_status(ScheduleStatus.SCHEDULED, started_before=now, ends_after=now, limit=batch_size)
        )
        scheduled_done = list(
            self._schedules.list_by_status(ScheduleStatus.SCHEDULED, ended_before=now, limit=batch_size)
        )
        ongoing_done = [
            b
            for status in (ScheduleStatus.ONGOING, ScheduleStatus.IN_PROGRESS)
            for b in self._schedules.list_by_status(status, ended_before=now, limit=batch_size)
        ]

        if not dry_run:
            to_ongoing = [b for b in to_ongoing if self._advance(b, ScheduleStatus.ONGOING, now)]
            ongoing_done = [b for b in ongoing_done if self._advance(b, ScheduleStatus.COMPLETED, now)]
            scheduled_done = [b for b in scheduled_done if self._advance(b, ScheduleStatus.COMPLETED, now)]

        report = StatusSweepReport(
            scheduled_to_ongoing=len(to_ongoing),
            ongoing_to_completed=len(ongoing_done),
            scheduled_to_completed=len(scheduled_done),
            dry_run=dry_run,
        )
        log.info(
            "schedule_status_sweep_finished",
            dry_run=dry_run,
            scheduled_to_ongoing=report.scheduled_to_ongoing,
            ongoing_to_completed=report.ongoing_to_completed,
            scheduled_to_completed=report.scheduled_to_completed,
        )
        return report

    def _advance(self, booking: Booking, status: ScheduleStatus, now: datetime) -> bool:
        with self._schedules.classroom_guard(booking.classroom_id):
            current = self._schedules.get_by_id(booking.schedule_id)
            if current is None or current.status != booking.status:
                return False
            if status == ScheduleStatus.ONGOING:
                due = current.start <= now < current.end
            else:
                due = current.end <= now
            if not due:
                return False
            self._schedules.save(self._machine.transition(current, status, now=now))
        return True

    # -- read side -------------------------------------------------------

    def utilization(self, classroom_id: int, start_date: date, end_date: date) -> UsageStats:
        classroom = self.get_classroom(classroom_id)
        bookings = [
            b
            for b in self._schedules.list_in_range(
                start_date=start_date, end_date=end_date, classroom_ids=[classroom.classroom_id]
            )
            if b.status != ScheduleStatus.CANCELLED
        ]
        return self._calculator.calculate(bookings, start_date, end_date)

    def calendar(
        self,
        start_date: date,
        end_date: date,
        classroom_ids: Optional[Sequence[int]] = None,
    ) -> dict[str, list[dict]]:
        """Bookings grouped by start date (YYYY-MM-DD), dates ascending."""
        bookings = self._schedules.list_in_range(start_date=start_date, end_date=end_date, classroom_ids=classroom_ids)
        names = self._classroom_names(b.classroom_id for b in bookings)

        calendar: dict[str, list[dict]] = {}
        for b in bookings:
            calendar.setdefault(b.schedule_date.strftime("%Y-%m-%d"), []).append(
                {
                    "id": b.schedule_id,
                    "title": b.course_content or "No course content",
                    "classroom": names.get(b.classroom_id, "-"),
                    "classroom_id": b.classroom_id,
                    "teacher_id": b.teacher_id,
                    "type": b.schedule_type.value,
                    "status": b.status.value,
                    "start_time": b.start.strftime("%H:%M"),
                    "end_time": b.end.strftime("%H:%M"),
                    "duration": b.duration_minutes,
                    "expected_students": b.expected_students,
                    "actual_students": b.actual_students,
                }
            )
        return dict(sorted(calendar.items()))

    def statistics_report(
        self,
        start_date: date,
        end_date: date,
        *,
        classroom_id: Optional[int] = None,
        teacher_id: Optional[str] = None,
    ) -> dict[str, int]:
        bookings = self._schedules.list_in_range(
            start_date=start_date,
            end_date=end_date,
            classroom_ids=[int(classroom_id)] if classroom_id is not None else None,
        )
        if teacher_id:
            bookings = [b for b in bookings if b.teacher_id == str(teacher_id)]

        return {
            "total_schedules": len(bookings),
            "total_classrooms": len({b.classroom_id for b in bookings}),
            "total_teachers": len({b.teacher_id for b in bookings}),
            "completed_schedules": sum(1 for b in bookings if b.status == ScheduleStatus.COMPLETED),
            "cancelled_schedules": sum(1 for b in bookings if b.status == ScheduleStatus.CANCELLED),
            "total_expected_students": sum(b.expected_students or 0 for b in bookings),
            "total_actual_students": sum(b.actual_students or 0 for b in bookings),
        }

    def find_available_classrooms(
        self,
        start: datetime,
        end: datetime,
        *,
        min_capacity: Optional[int] = None,
        required_devices: Iterable[str] = (),
    ) -> list[Classroom]:
        """Classrooms meeting capacity/device requirements that are free in [start, end), largest first."""
        time_range = self._range(start, end)
        required = set(required_devices)

        out: list[Classroom] = []
        for classroom in self._classrooms.list_all():
            if min_capacity is not None and classroom.capacity < int(min_capacity):
                continue
            if not required.issubset(classroom.device_types()):
                continue
            if self._conflicts.find_conflicts(classroom.classroom_id, time_range):
                continue
            out.append(classroom)

        out.sort(key=lambda c: c.capacity, reverse=True)
        return out

    def _classroom_names(self, classroom_ids: Iterable[int]) -> dict[int, str]:
        names: dict[int, str] = {}
        for cid in set(classroom_ids):
            classroom = self._classrooms.get_by_id(cid)
            if classroom:
                names[cid] = classroom.name
        return names
