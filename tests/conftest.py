from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterator, Optional, Sequence

import pytest

from train_classroom.attendance.model import AttendanceEvent
from train_classroom.attendance.service import AttendanceService
from train_classroom.classrooms.model import Classroom
from train_classroom.common.clock import FixedClock
from train_classroom.core.enums import AttendanceType, ScheduleStatus
from train_classroom.devices.manager import AttendanceDeviceManager
from train_classroom.devices.verifier import ManualVerifier, QrCodeVerifier
from train_classroom.enrollments.model import Course, Enrollment
from train_classroom.schedules.batch import BatchScheduler
from train_classroom.schedules.model import Booking
from train_classroom.schedules.service import ScheduleService

QR_TOKEN = "TEST_TOKEN"


@dataclass
class InMemoryClassrooms:
    classrooms: dict[int, Classroom] = field(default_factory=dict)

    def get_by_id(self, classroom_id: int) -> Optional[Classroom]:
        return self.classrooms.get(classroom_id)

    def list_all(self) -> Sequence[Classroom]:
        return list(self.classrooms.values())


class InMemorySchedules:
    def __init__(self):
        self._items: dict[int, Booking] = {}
        self._id = 0
        self._locks: dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def get_by_id(self, schedule_id: int) -> Optional[Booking]:
        return self._items.get(schedule_id)

    def list_for_classroom(self, classroom_id: int) -> Sequence[Booking]:
        items = [b for b in self._items.values() if b.classroom_id == classroom_id]
        return sorted(items, key=lambda b: b.start)

    def list_in_range(self, *, start_date: date, end_date: date, classroom_ids=None) -> Sequence[Booking]:
        items = [
            b
            for b in self._items.values()
            if start_date <= b.schedule_date <= end_date and (not classroom_ids or b.classroom_id in classroom_ids)
        ]
        return sorted(items, key=lambda b: (b.start, b.schedule_id))

    def list_by_status(
        self,
        status: ScheduleStatus,
        *,
        limit: int,
        started_before: Optional[datetime] = None,
        ended_before: Optional[datetime] = None,
        ends_after: Optional[datetime] = None,
    ) -> Sequence[Booking]:
        items = [
            b
            for b in self._items.values()
            if b.status == status
            and (started_before is None or b.start <= started_before)
            and (ended_before is None or b.end <= ended_before)
            and (ends_after is None or b.end > ends_after)
        ]
        return sorted(items, key=lambda b: b.start)[:limit]

    def add(self, booking: Booking) -> Booking:
        self._id += 1
        stored = replace(booking, schedule_id=self._id)
        self._items[self._id] = stored
        return stored

    def save(self, booking: Booking) -> Booking:
        self._items[booking.schedule_id] = booking
        return booking

    @contextmanager
    def classroom_guard(self, classroom_id: int) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(classroom_id, threading.Lock())
        with lock:
            yield


@dataclass
class InMemoryEnrollments:
    enrollments: dict[int, Enrollment] = field(default_factory=dict)

    def get_by_id(self, enrollment_id: int) -> Optional[Enrollment]:
        return self.enrollments.get(enrollment_id)

    def get_course(self, course_id: int) -> Optional[Course]:
        for e in self.enrollments.values():
            if e.course.course_id == course_id:
                return e.course
        return None

    def list_for_course(self, course_id: int) -> Sequence[Enrollment]:
        return [e for e in self.enrollments.values() if e.course.course_id == course_id]


class InMemoryAttendance:
    def __init__(self):
        self.events: list[AttendanceEvent] = []
        self._id = 0

    def list_for_enrollment(
        self,
        enrollment_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        attendance_type: Optional[AttendanceType] = None,
    ) -> Sequence[AttendanceEvent]:
        items = [
            e
            for e in self.events
            if e.enrollment_id == enrollment_id
            and (start is None or e.recorded_at >= start)
            and (end is None or e.recorded_at <= end)
            and (attendance_type is None or e.attendance_type == attendance_type)
        ]
        return sorted(items, key=lambda e: e.recorded_at)

    def add(self, event: AttendanceEvent) -> AttendanceEvent:
        self._id += 1
        stored = replace(event, record_id=self._id)
        self.events.append(stored)
        return stored


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 4, 8, 0))


@pytest.fixture
def classrooms() -> InMemoryClassrooms:
    return InMemoryClassrooms(
        {
            1: Classroom(1, "Room 101", 30, devices=({"type": "qr_scanner", "device_id": "QR-1"},)),
            2: Classroom(2, "Room 102", 50),
            3: Classroom(
                3,
                "Lab A",
                20,
                devices=({"type": "card_reader"}, {"type": "face_recognition"}),
            ),
        }
    )


@pytest.fixture
def schedules() -> InMemorySchedules:
    return InMemorySchedules()


@pytest.fixture
def schedule_service(schedules, classrooms, clock) -> ScheduleService:
    return ScheduleService(schedules, classrooms, clock=clock)


@pytest.fixture
def batch_scheduler(schedule_service) -> BatchScheduler:
    return BatchScheduler(schedule_service)


@pytest.fixture
def course() -> Course:
    # Ten calendar days: 1..10 March.
    return Course(7, "Python basics", start_time=datetime(2024, 3, 1, 9, 0), end_time=datetime(2024, 3, 10, 18, 0))


@pytest.fixture
def enrollments(course) -> InMemoryEnrollments:
    return InMemoryEnrollments(
        {
            1: Enrollment(1, student_id=100, course=course, classroom_id=1, begin_time=datetime(2024, 3, 1, 0, 0)),
            2: Enrollment(2, student_id=101, course=course, classroom_id=1, begin_time=datetime(2024, 3, 1, 0, 0)),
            3: Enrollment(
                3,
                student_id=102,
                course=course,
                classroom_id=1,
                begin_time=datetime(2024, 3, 1, 0, 0),
                finished=True,
            ),
        }
    )


@pytest.fixture
def attendance() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def qr_token() -> str:
    return QR_TOKEN


@pytest.fixture
def device_manager() -> AttendanceDeviceManager:
    return AttendanceDeviceManager([ManualVerifier(), QrCodeVerifier(QR_TOKEN)])


@pytest.fixture
def attendance_service(attendance, enrollments, classrooms, clock, device_manager) -> AttendanceService:
    return AttendanceService(attendance, enrollments, classrooms, clock=clock, device_manager=device_manager)
