from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime, tzinfo
from typing import Any, Dict, Iterator, List, Optional

from .connection import DatabaseConnection


@contextmanager
def transaction(conn_factory: DatabaseConnection) -> Iterator[Any]:
    """Open a transaction shared by every db_cursor on this thread.

    Nested calls join the outer transaction.
    """
    if conn_factory.active is not None:
        yield conn_factory.active
        return

    conn = conn_factory.connect()
    conn.start_transaction()
    conn_factory.bind(conn)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn_factory.bind(None)
        conn.close()


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    shared = conn_factory.active
    if shared is not None:
        cur = shared.cursor(dictionary=dictionary)
        try:
            yield shared, cur
        finally:
            cur.close()
        return

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def dump_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False, default=str)


def load_json(value: Any) -> Any:
    """JSON columns come back as str or bytes depending on the connector build."""
    if value is None or value == "":
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value)
    return value


def to_db_datetime(value: Optional[datetime], tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """DATETIME columns are naive wall-clock time in the configured zone."""
    if value is None or value.tzinfo is None:
        return value
    if tz is not None:
        value = value.astimezone(tz)
    return value.replace(tzinfo=None)


def from_db_datetime(value: Optional[datetime], tz: Optional[tzinfo] = None) -> Optional[datetime]:
    if value is None or tz is None:
        return value
    return value.replace(tzinfo=tz)
