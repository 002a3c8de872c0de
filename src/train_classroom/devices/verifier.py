from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.enums import AttendanceMethod, VerificationResult


@dataclass(frozen=True)
class VerificationOutcome:
    success: bool
    result: VerificationResult
    message: Optional[str] = None


class CapabilityVerifier(ABC):
    """Capture-device integration for one or more attendance methods.

    Payloads (card numbers, QR contents, biometric templates) are only ever
    interpreted by the verifier; the engine just stores the outcome.
    """

    @abstractmethod
    def supports(self, method: AttendanceMethod) -> bool:
        raise NotImplementedError

    @abstractmethod
    def verify(self, device: Mapping[str, Any], payload: Mapping[str, Any]) -> VerificationOutcome:
        raise NotImplementedError


class ManualVerifier(CapabilityVerifier):
    """Entries keyed in by staff are trusted."""

    def supports(self, method: AttendanceMethod) -> bool:
        return method == AttendanceMethod.MANUAL

    def verify(self, device: Mapping[str, Any], payload: Mapping[str, Any]) -> VerificationOutcome:
        return VerificationOutcome(success=True, result=VerificationResult.SUCCESS)


class QrCodeVerifier(CapabilityVerifier):
    """Accepts a scan when the code matches the classroom token.

    The device config may carry its own `token`; otherwise the configured
    default token is used.
    """

    def __init__(self, token: str):
        self._token = token

    def supports(self, method: AttendanceMethod) -> bool:
        return method == AttendanceMethod.QR_CODE

    def verify(self, device: Mapping[str, Any], payload: Mapping[str, Any]) -> VerificationOutcome:
        code = str(payload.get("qr_code") or "").strip()
        if not code:
            return VerificationOutcome(success=False, result=VerificationResult.FAILED, message="QR code is empty")

        expected = str(device.get("token") or self._token)
        if code != expected:
            return VerificationOutcome(success=False, result=VerificationResult.FAILED, message="QR code is not valid")
        return VerificationOutcome(success=True, result=VerificationResult.SUCCESS)
