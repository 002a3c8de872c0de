from __future__ import annotations

from datetime import date, datetime, time
from typing import Tuple

from ..core.exceptions import ValidationError


def parse_iso_datetime(value: object, field_name: str) -> datetime:
    """Parse an ISO-8601 timestamp coming from import rows or API payloads."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} has an invalid format")
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"{field_name} has an invalid format")


def align_to(value: datetime, reference: datetime) -> datetime:
    """Bring `value` into the naive/aware form of `reference`.

    A naive value is read as wall-clock time in the reference's zone; an aware
    value against a naive reference becomes naive server-local time.
    """
    if reference.tzinfo is not None:
        if value.tzinfo is None:
            return value.replace(tzinfo=reference.tzinfo)
        return value
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def day_bounds(moment: datetime) -> Tuple[datetime, datetime]:
    """Local calendar day [00:00:00, 23:59:59.999999] containing `moment`.

    The bounds carry the same tzinfo as `moment` (naive stays naive).
    """
    day = moment.date()
    return (
        datetime.combine(day, time.min, tzinfo=moment.tzinfo),
        datetime.combine(day, time.max, tzinfo=moment.tzinfo),
    )


def days_inclusive(start: date, end: date) -> int:
    """Number of calendar days from start to end, both included."""
    return (end - start).days + 1


def as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value
