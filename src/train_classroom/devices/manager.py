from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..classrooms.model import Classroom
from ..common.logging import get_logger
from ..core.enums import AttendanceMethod, VerificationResult
from .verifier import CapabilityVerifier, VerificationOutcome

log = get_logger(__name__)

DEVICE_TYPE_METHODS: Mapping[str, AttendanceMethod] = {
    "face_recognition": AttendanceMethod.FACE,
    "fingerprint": AttendanceMethod.FINGERPRINT,
    "card_reader": AttendanceMethod.CARD,
    "qr_scanner": AttendanceMethod.QR_CODE,
}


class AttendanceDeviceManager:
    """Routes a capture to the classroom device and verifier for its method."""

    def __init__(self, verifiers: Sequence[CapabilityVerifier]):
        self._verifiers = tuple(verifiers)

    def supported_methods(self, classroom: Classroom) -> list[AttendanceMethod]:
        methods: list[AttendanceMethod] = []
        for device in classroom.devices:
            method = DEVICE_TYPE_METHODS.get(str(device.get("type", "unknown")))
            if method and method not in methods:
                methods.append(method)
        # Manual entry needs no hardware.
        if AttendanceMethod.MANUAL not in methods:
            methods.append(AttendanceMethod.MANUAL)
        return methods

    def find_device(self, classroom: Classroom, method: AttendanceMethod) -> Optional[Mapping[str, Any]]:
        for device in classroom.devices:
            if DEVICE_TYPE_METHODS.get(str(device.get("type", "unknown"))) == method:
                return device
        return None

    def verify(
        self,
        classroom: Classroom,
        method: AttendanceMethod,
        payload: Mapping[str, Any],
    ) -> VerificationOutcome:
        device = self.find_device(classroom, method)
        if device is None and method != AttendanceMethod.MANUAL:
            return VerificationOutcome(
                success=False,
                result=VerificationResult.DEVICE_ERROR,
                message="No device supports this attendance method",
            )

        verifier = next((v for v in self._verifiers if v.supports(method)), None)
        if verifier is None:
            return VerificationOutcome(
                success=False,
                result=VerificationResult.FAILED,
                message="Unsupported attendance method",
            )

        try:
            return verifier.verify(device or {}, payload)
        except Exception as e:
            # A broken device yields a recorded DEVICE_ERROR outcome, not a lost event.
            log.error(
                "attendance_verification_failed",
                classroom_id=classroom.classroom_id,
                method=method.value,
                error=str(e),
            )
            return VerificationOutcome(success=False, result=VerificationResult.DEVICE_ERROR, message=str(e))
