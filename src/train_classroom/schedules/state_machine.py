"""Booking status rules.

Every property of a status lives in one lookup table so the rules can be checked
exhaustively; the machine itself never blocks a transition. Callers such as
postpone/cancel enforce their own preconditions.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Mapping, Optional

from ..common.time_range import TimeRange
from ..core.enums import ScheduleStatus
from .model import Booking, ScheduleRemark


@dataclass(frozen=True)
class StatusTraits:
    label: str
    editable: bool
    active: bool
    finished: bool
    blocks_slot: bool


STATUS_TRAITS: Mapping[ScheduleStatus, StatusTraits] = {
    ScheduleStatus.SCHEDULED: StatusTraits("Scheduled", editable=True, active=True, finished=False, blocks_slot=True),
    ScheduleStatus.ONGOING: StatusTraits("In progress", editable=False, active=True, finished=False, blocks_slot=True),
    ScheduleStatus.IN_PROGRESS: StatusTraits("In progress", editable=False, active=True, finished=False, blocks_slot=True),
    ScheduleStatus.COMPLETED: StatusTraits("Completed", editable=False, active=False, finished=True, blocks_slot=False),
    ScheduleStatus.CANCELLED: StatusTraits("Cancelled", editable=False, active=False, finished=True, blocks_slot=False),
    ScheduleStatus.SUSPENDED: StatusTraits("Suspended", editable=True, active=False, finished=False, blocks_slot=True),
    ScheduleStatus.POSTPONED: StatusTraits("Postponed", editable=True, active=False, finished=False, blocks_slot=True),
}


def is_editable(status: ScheduleStatus) -> bool:
    return STATUS_TRAITS[status].editable


def is_active(status: ScheduleStatus) -> bool:
    return STATUS_TRAITS[status].active


def is_finished(status: ScheduleStatus) -> bool:
    return STATUS_TRAITS[status].finished


def blocks_slot(status: ScheduleStatus) -> bool:
    """Whether a booking in this status keeps its time slot reserved."""
    return STATUS_TRAITS[status].blocks_slot


def label(status: ScheduleStatus) -> str:
    return STATUS_TRAITS[status].label


class ScheduleStateMachine:
    """Labels booking states and writes the append-only status history."""

    def transition(
        self,
        booking: Booking,
        new_status: ScheduleStatus,
        *,
        now: datetime,
        reason: Optional[str] = None,
    ) -> Booking:
        history = booking.history
        if reason is not None:
            history = history + (
                ScheduleRemark(
                    recorded_at=now,
                    old_status=booking.status,
                    new_status=new_status,
                    reason=reason,
                ),
            )
        return replace(booking, status=new_status, history=history)

    def cancel(self, booking: Booking, *, now: datetime, reason: str) -> Booking:
        # Cancellation is permitted from every status.
        return self.transition(booking, ScheduleStatus.CANCELLED, now=now, reason=reason)

    def reschedule(self, booking: Booking, new_range: TimeRange, *, now: datetime, reason: str) -> Booking:
        """Move the booking to `new_range` and mark it POSTPONED.

        Conflict checking is the caller's job; this only rewrites the booking
        and records the range it left.
        """
        entry = ScheduleRemark(
            recorded_at=now,
            old_status=booking.status,
            new_status=ScheduleStatus.POSTPONED,
            reason=reason,
            previous_range=booking.time_range,
        )
        return replace(
            booking,
            time_range=new_range,
            status=ScheduleStatus.POSTPONED,
            history=booking.history + (entry,),
        )

    def can_be_cancelled(self, booking: Booking, *, now: datetime) -> bool:
        """Advisory only: `cancel` does not consult it."""
        return is_editable(booking.status) and booking.start > now

    def is_ongoing(self, booking: Booking, *, now: datetime) -> bool:
        return booking.time_range.contains(now)
