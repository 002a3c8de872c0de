from __future__ import annotations

from dataclasses import asdict
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from ..common.datetime_utils import parse_iso_datetime
from ..common.logging import get_logger
from ..core.enums import ScheduleType
from ..core.exceptions import ConflictError, DomainError, ValidationError
from .model import BatchError, BatchResult, BookingRequest
from .service import ScheduleService

log = get_logger(__name__)

RequestLike = Union[BookingRequest, Mapping[str, Any]]


def parse_request(data: RequestLike) -> BookingRequest:
    """Build a BookingRequest from an import row.

    Accepted keys: classroom_id, teacher_id (or course_id), type, start_time,
    end_time (ISO-8601), options.
    """
    if isinstance(data, BookingRequest):
        return data
    if not isinstance(data, Mapping):
        raise ValidationError("Schedule row must be a mapping")

    classroom_id = data.get("classroom_id")
    if classroom_id is None or not str(classroom_id).strip().isdigit():
        raise ValidationError("classroom_id has an invalid format")

    teacher_id = data.get("teacher_id", data.get("course_id"))
    if teacher_id is None or not str(teacher_id).strip():
        raise ValidationError("teacher_id has an invalid format")

    try:
        schedule_type = ScheduleType(str(data.get("type")))
    except ValueError:
        raise ValidationError(f"Unknown schedule type: {data.get('type')!r}")

    options = data.get("options") or {}
    if not isinstance(options, Mapping):
        raise ValidationError("options must be a mapping")

    return BookingRequest(
        classroom_id=int(str(classroom_id).strip()),
        teacher_id=str(teacher_id).strip(),
        schedule_type=schedule_type,
        start=parse_iso_datetime(data.get("start_time"), "start_time"),
        end=parse_iso_datetime(data.get("end_time"), "end_time"),
        options={str(k): v for k, v in options.items()},
    )


class BatchScheduler:
    """Applies booking requests one by one, in input order.

    Each accepted booking is persisted before the next request is checked, so a
    batch can never admit two mutually conflicting entries. Nothing is rolled
    back when a later item fails.
    """

    def __init__(self, schedules: ScheduleService):
        self._schedules = schedules

    def create_many(
        self,
        requests: Sequence[RequestLike],
        *,
        skip_conflicts: bool = False,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> BatchResult:
        result = BatchResult()

        for index, data in enumerate(requests):
            if should_stop is not None and should_stop():
                result.stopped = True
                break

            try:
                req = parse_request(data)
                self._schedules.create_booking(
                    classroom_id=req.classroom_id,
                    teacher_id=req.teacher_id,
                    schedule_type=req.schedule_type,
                    start=req.start,
                    end=req.end,
                    options=req.options,
                )
                result.succeeded += 1
            except ConflictError as e:
                if skip_conflicts:
                    result.skipped += 1
                    continue
                result.failed += 1
                result.errors.append(BatchError(index=index, error=str(e), data=_echo(data)))
            except DomainError as e:
                result.failed += 1
                result.errors.append(BatchError(index=index, error=str(e), data=_echo(data)))

        log.info(
            "schedule_batch_finished",
            total=len(requests),
            succeeded=result.succeeded,
            failed=result.failed,
            skipped=result.skipped,
            stopped=result.stopped,
        )
        return result


def _echo(data: RequestLike) -> Any:
    return asdict(data) if isinstance(data, BookingRequest) else data
