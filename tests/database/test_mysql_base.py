from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from train_classroom.common.time_range import TimeRange
from train_classroom.core.enums import ScheduleStatus, ScheduleType
from train_classroom.database.bootstrap import SCHEMA_PATH, iter_sql_statements
from train_classroom.database.mysql_base import (
    db_cursor,
    from_db_datetime,
    load_json,
    to_db_datetime,
    transaction,
)
from train_classroom.schedules.model import Booking, ScheduleRemark
from train_classroom.schedules.mysql_schedule_repository import MySQLScheduleRepository


class FakeCursor:
    def __init__(self, conn: "FakeConnection"):
        self._conn = conn
        self.lastrowid = 0
        self.rowcount = 0
        self._rows: list[dict] = []

    def execute(self, sql: str, params=()):
        self._conn.statements.append((" ".join(sql.split()), tuple(params)))
        if sql.lstrip().upper().startswith("INSERT"):
            self._conn.next_id += 1
            self.lastrowid = self._conn.next_id
        self._rows = list(self._conn.rows)

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class FakeConnection:
    def __init__(self):
        self.statements: list[tuple[str, tuple]] = []
        self.rows: list[dict] = []
        self.next_id = 0
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self, dictionary: bool = True):
        return FakeCursor(self)

    def start_transaction(self):
        self.statements.append(("START TRANSACTION", ()))

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


class FakeConnectionFactory:
    """Hands out FakeConnections and mimics DatabaseConnection's thread binding."""

    def __init__(self):
        self.opened: list[FakeConnection] = []
        self._active = None

    def connect(self):
        conn = FakeConnection()
        self.opened.append(conn)
        return conn

    @property
    def active(self):
        return self._active

    def bind(self, conn):
        self._active = conn


def test_db_cursor_commits_and_closes():
    factory = FakeConnectionFactory()
    with db_cursor(factory) as (_, cur):
        cur.execute("SELECT 1")

    conn = factory.opened[0]
    assert conn.commits == 1
    assert conn.closed


def test_db_cursor_rolls_back_on_error():
    factory = FakeConnectionFactory()
    with pytest.raises(RuntimeError):
        with db_cursor(factory) as (_, cur):
            raise RuntimeError("boom")

    assert factory.opened[0].rollbacks == 1


def test_cursors_inside_transaction_share_one_connection():
    factory = FakeConnectionFactory()
    with transaction(factory):
        with db_cursor(factory) as (_, cur):
            cur.execute("SELECT 1")
        with transaction(factory):
            with db_cursor(factory) as (_, cur):
                cur.execute("SELECT 2")

    assert len(factory.opened) == 1
    assert factory.opened[0].commits == 1
    assert factory.active is None


def test_transaction_rolls_back_and_unbinds():
    factory = FakeConnectionFactory()
    with pytest.raises(ValueError):
        with transaction(factory):
            raise ValueError("conflict")

    assert factory.opened[0].rollbacks == 1
    assert factory.opened[0].commits == 0
    assert factory.active is None


def test_datetime_round_trip_through_naive_columns():
    tz = timezone(timedelta(hours=7))
    aware = datetime(2024, 3, 4, 9, 0, tzinfo=tz)

    stored = to_db_datetime(aware, tz)
    assert stored == datetime(2024, 3, 4, 9, 0)
    assert from_db_datetime(stored, tz) == aware
    assert to_db_datetime(datetime(2024, 3, 4, 9, 0)) == datetime(2024, 3, 4, 9, 0)


def test_load_json_accepts_bytes_and_text():
    assert load_json(b'[{"type": "qr_scanner"}]') == [{"type": "qr_scanner"}]
    assert load_json('{"a": 1}') == {"a": 1}
    assert load_json(None) is None


def test_schema_script_splits_into_create_statements():
    statements = list(iter_sql_statements(SCHEMA_PATH.read_text(encoding="utf-8")))
    creates = [s for s in statements if s.upper().startswith("CREATE TABLE")]
    assert len(creates) == 5
    assert not any(s.startswith("--") for s in statements)


def test_iter_sql_statements_ignores_semicolons_in_quotes():
    sql = "INSERT INTO t VALUES ('a;b');\nSELECT 1;"
    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", "SELECT 1"]


def test_schedule_repository_writes_history_and_locks_classroom():
    factory = FakeConnectionFactory()
    repo = MySQLScheduleRepository(factory)
    booking = Booking(
        schedule_id=None,
        classroom_id=1,
        teacher_id="T1",
        time_range=TimeRange(datetime(2024, 3, 4, 9), datetime(2024, 3, 4, 10)),
        schedule_type=ScheduleType.LECTURE,
        history=(ScheduleRemark(recorded_at=datetime(2024, 3, 4, 8), new_status=ScheduleStatus.SCHEDULED, reason="x"),),
    )

    with repo.classroom_guard(1):
        stored = repo.add(booking)

    assert stored.schedule_id == 1
    conn = factory.opened[0]
    sqls = [s for s, _ in conn.statements]
    assert sqls[0] == "START TRANSACTION"
    assert sqls[1].endswith("FOR UPDATE")
    assert sqls[2].startswith("INSERT INTO classroom_schedules")
    assert conn.commits == 1


def test_schedule_repository_maps_rows():
    factory = FakeConnectionFactory()
    repo = MySQLScheduleRepository(factory)

    def connect():
        conn = FakeConnection()
        conn.rows = [
            {
                "schedule_id": 5,
                "classroom_id": 2,
                "teacher_id": "T7",
                "schedule_type": "EXAM",
                "status": "POSTPONED",
                "start_time": datetime(2024, 3, 5, 9),
                "end_time": datetime(2024, 3, 5, 11),
                "course_content": None,
                "expected_students": 12,
                "actual_students": None,
                "history": (
                    '[{"recorded_at": "2024-03-04T08:00:00", "new_status": "POSTPONED", "old_status": "SCHEDULED",'
                    ' "reason": "Room flooded", "previous_start": "2024-03-04T09:00:00",'
                    ' "previous_end": "2024-03-04T11:00:00"}]'
                ),
            }
        ]
        return conn

    factory.connect = connect
    booking = repo.get_by_id(5)

    assert booking.status == ScheduleStatus.POSTPONED
    assert booking.schedule_type == ScheduleType.EXAM
    assert booking.expected_students == 12
    assert booking.history[0].previous_range.start == datetime(2024, 3, 4, 9)
    assert booking.remark_text().endswith("reason: Room flooded")


def test_list_by_status_filters_end_time_before_limit():
    factory = FakeConnectionFactory()
    repo = MySQLScheduleRepository(factory)
    now = datetime(2024, 3, 4, 11)

    repo.list_by_status(ScheduleStatus.ONGOING, ended_before=now, limit=5)

    sql, params = factory.opened[0].statements[0]
    assert "status=%s AND end_time <= %s" in sql
    assert "start_time <=" not in sql
    assert sql.index("end_time <= %s") < sql.index("LIMIT %s")
    assert params == ("ONGOING", now, 5)
