from __future__ import annotations

from typing import Any, Mapping

from train_classroom.classrooms.model import Classroom
from train_classroom.core.enums import AttendanceMethod, VerificationResult
from train_classroom.devices.manager import AttendanceDeviceManager
from train_classroom.devices.verifier import (
    CapabilityVerifier,
    ManualVerifier,
    QrCodeVerifier,
    VerificationOutcome,
)


class BrokenCardReader(CapabilityVerifier):
    def supports(self, method: AttendanceMethod) -> bool:
        return method == AttendanceMethod.CARD

    def verify(self, device: Mapping[str, Any], payload: Mapping[str, Any]) -> VerificationOutcome:
        raise ConnectionError("reader offline")


ROOM = Classroom(
    1,
    "Room 101",
    30,
    devices=({"type": "card_reader"}, {"type": "qr_scanner", "token": "ROOM-1"}, {"type": "projector"}),
)


def test_supported_methods_always_include_manual():
    manager = AttendanceDeviceManager([ManualVerifier()])
    assert manager.supported_methods(ROOM) == [AttendanceMethod.CARD, AttendanceMethod.QR_CODE, AttendanceMethod.MANUAL]
    assert manager.supported_methods(Classroom(2, "Empty", 10)) == [AttendanceMethod.MANUAL]


def test_device_token_overrides_default():
    manager = AttendanceDeviceManager([QrCodeVerifier("DEFAULT")])

    assert manager.verify(ROOM, AttendanceMethod.QR_CODE, {"qr_code": "ROOM-1"}).success
    outcome = manager.verify(ROOM, AttendanceMethod.QR_CODE, {"qr_code": "DEFAULT"})
    assert outcome.result == VerificationResult.FAILED


def test_empty_qr_code():
    outcome = QrCodeVerifier("T").verify({}, {"qr_code": "  "})
    assert outcome.result == VerificationResult.FAILED
    assert outcome.message == "QR code is empty"


def test_missing_verifier_fails():
    manager = AttendanceDeviceManager([ManualVerifier()])
    outcome = manager.verify(ROOM, AttendanceMethod.QR_CODE, {"qr_code": "ROOM-1"})
    assert outcome.result == VerificationResult.FAILED


def test_verifier_exception_becomes_device_error():
    manager = AttendanceDeviceManager([BrokenCardReader()])
    outcome = manager.verify(ROOM, AttendanceMethod.CARD, {"card_no": "0042"})
    assert not outcome.success
    assert outcome.result == VerificationResult.DEVICE_ERROR
    assert outcome.message == "reader offline"


def test_manual_needs_no_device():
    manager = AttendanceDeviceManager([ManualVerifier()])
    assert manager.verify(Classroom(2, "Empty", 10), AttendanceMethod.MANUAL, {}).success
