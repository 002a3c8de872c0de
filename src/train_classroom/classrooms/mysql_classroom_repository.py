from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json
from .model import Classroom
from .repository import ClassroomRepository


def _row_to_classroom(r: dict) -> Classroom:
    devices = load_json(r.get("devices")) or []
    return Classroom(
        classroom_id=int(r["classroom_id"]),
        name=r["name"],
        capacity=int(r.get("capacity") or 0),
        devices=tuple(d for d in devices if isinstance(d, dict)),
        location=r.get("location"),
    )


class MySQLClassroomRepository(ClassroomRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, classroom_id: int) -> Optional[Classroom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT classroom_id, name, capacity, location, devices
                FROM classrooms
                WHERE classroom_id=%s
                """,
                (int(classroom_id),),
            )
            r = fetchone(cur)
            return _row_to_classroom(r) if r else None

    def list_all(self) -> Sequence[Classroom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT classroom_id, name, capacity, location, devices
                FROM classrooms
                ORDER BY classroom_id ASC
                """
            )
            return [_row_to_classroom(r) for r in fetchall(cur)]
