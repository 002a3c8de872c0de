from __future__ import annotations

from dataclasses import replace
from datetime import datetime, tzinfo
from typing import Optional, Sequence

from ..core.enums import AttendanceMethod, AttendanceType, VerificationResult
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, from_db_datetime, load_json, to_db_datetime
from .model import AttendanceEvent
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, tz: Optional[tzinfo] = None):
        self._conn_factory = conn_factory
        self._tz = tz

    def _row_to_event(self, r: dict) -> AttendanceEvent:
        return AttendanceEvent(
            record_id=int(r["record_id"]),
            enrollment_id=int(r["enrollment_id"]),
            attendance_type=AttendanceType(r["attendance_type"]),
            method=AttendanceMethod(r["method"]),
            recorded_at=from_db_datetime(r["record_time"], self._tz),
            verification_result=VerificationResult(r["verification_result"]),
            is_valid=bool(r.get("is_valid")),
            device_data=load_json(r.get("device_data")),
            device_id=r.get("device_id"),
            device_location=r.get("device_location"),
            latitude=r.get("latitude"),
            longitude=r.get("longitude"),
            remark=r.get("remark"),
        )

    def list_for_enrollment(
        self,
        enrollment_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        attendance_type: Optional[AttendanceType] = None,
    ) -> Sequence[AttendanceEvent]:
        clauses = ["enrollment_id=%s"]
        params: list[object] = [int(enrollment_id)]
        if start is not None:
            clauses.append("record_time >= %s")
            params.append(to_db_datetime(start, self._tz))
        if end is not None:
            clauses.append("record_time <= %s")
            params.append(to_db_datetime(end, self._tz))
        if attendance_type is not None:
            clauses.append("attendance_type=%s")
            params.append(AttendanceType(attendance_type).value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT record_id, enrollment_id, attendance_type, method, record_time, verification_result,
                       is_valid, device_data, device_id, device_location, latitude, longitude, remark
                FROM attendance_records
                WHERE {where}
                ORDER BY record_time ASC, record_id ASC
                """,
                tuple(params),
            )
            return [self._row_to_event(r) for r in fetchall(cur)]

    def add(self, event: AttendanceEvent) -> AttendanceEvent:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    enrollment_id, attendance_type, method, record_time, verification_result, is_valid,
                    device_data, device_id, device_location, latitude, longitude, remark
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(event.enrollment_id),
                    event.attendance_type.value,
                    event.method.value,
                    to_db_datetime(event.recorded_at, self._tz),
                    event.verification_result.value,
                    1 if event.is_valid else 0,
                    dump_json(dict(event.device_data)) if event.device_data else None,
                    event.device_id,
                    event.device_location,
                    event.latitude,
                    event.longitude,
                    event.remark,
                ),
            )
            return replace(event, record_id=int(cur.lastrowid))
