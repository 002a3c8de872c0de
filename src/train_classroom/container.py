from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Optional
from zoneinfo import ZoneInfo

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .classrooms.mysql_classroom_repository import MySQLClassroomRepository
from .common.clock import SystemClock
from .core.constants import DEFAULT_QR_TOKEN, WORK_HOURS_PER_DAY
from .database.connection import DBConfig, DatabaseConnection
from .devices.manager import AttendanceDeviceManager
from .devices.verifier import ManualVerifier, QrCodeVerifier
from .enrollments.mysql_enrollment_repository import MySQLEnrollmentRepository
from .schedules.batch import BatchScheduler
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .schedules.utilization import UtilizationCalculator


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    clock: SystemClock

    classrooms_repo: MySQLClassroomRepository
    schedules_repo: MySQLScheduleRepository
    enrollments_repo: MySQLEnrollmentRepository
    attendance_repo: MySQLAttendanceRepository

    schedule_service: ScheduleService
    batch_scheduler: BatchScheduler
    attendance_service: AttendanceService


def build_container(*, db_config: dict, settings: Optional[ModuleType] = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    timezone = getattr(settings, "TIMEZONE", "") or None
    tz = ZoneInfo(timezone) if timezone else None
    clock = SystemClock(timezone)

    classrooms_repo = MySQLClassroomRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn, tz=tz)
    enrollments_repo = MySQLEnrollmentRepository(conn, tz=tz)
    attendance_repo = MySQLAttendanceRepository(conn, tz=tz)

    schedule_service = ScheduleService(
        schedules_repo,
        classrooms_repo,
        clock=clock,
        calculator=UtilizationCalculator(int(getattr(settings, "WORK_HOURS_PER_DAY", WORK_HOURS_PER_DAY))),
    )
    device_manager = AttendanceDeviceManager(
        [ManualVerifier(), QrCodeVerifier(str(getattr(settings, "QR_TOKEN", DEFAULT_QR_TOKEN)))]
    )
    attendance_service = AttendanceService(
        attendance_repo,
        enrollments_repo,
        classrooms_repo,
        clock=clock,
        device_manager=device_manager,
    )

    return Container(
        conn=conn,
        clock=clock,
        classrooms_repo=classrooms_repo,
        schedules_repo=schedules_repo,
        enrollments_repo=enrollments_repo,
        attendance_repo=attendance_repo,
        schedule_service=schedule_service,
        batch_scheduler=BatchScheduler(schedule_service),
        attendance_service=attendance_service,
    )
