from __future__ import annotations

from enum import Enum


class ScheduleStatus(str, Enum):
    """Booking lifecycle status stored with each classroom schedule."""

    SCHEDULED = "SCHEDULED"
    ONGOING = "ONGOING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    SUSPENDED = "SUSPENDED"
    POSTPONED = "POSTPONED"


class ScheduleType(str, Enum):
    REGULAR = "REGULAR"
    MAKEUP = "MAKEUP"
    EXAM = "EXAM"
    MEETING = "MEETING"
    PRACTICE = "PRACTICE"
    LECTURE = "LECTURE"


class AttendanceType(str, Enum):
    """Kind of attendance action a student performed."""

    SIGN_IN = "SIGN_IN"
    SIGN_OUT = "SIGN_OUT"
    BREAK_OUT = "BREAK_OUT"
    BREAK_IN = "BREAK_IN"


class AttendanceMethod(str, Enum):
    """How the attendance event was captured."""

    FACE = "FACE"
    FINGERPRINT = "FINGERPRINT"
    CARD = "CARD"
    QR_CODE = "QR_CODE"
    MANUAL = "MANUAL"
    MOBILE = "MOBILE"


class VerificationResult(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    PENDING = "PENDING"
    TIMEOUT = "TIMEOUT"
    ERROR = "ERROR"
    DEVICE_ERROR = "DEVICE_ERROR"

