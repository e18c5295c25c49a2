from enum import StrEnum
from typing import Any

from courier_registry.domain.shared.model.value import ValueObject


class ProbeFailureReason(StrEnum):
    INVALID_LINK = "invalid-link"
    UNREACHABLE = "unreachable"
    EMPTY_RESPONSE = "empty-response"
    INVALID_JSON = "invalid-json"
    TIMEOUT = "timeout"


class ProbeResult(ValueObject):
    """Outcome of one metadata probe.

    Exactly one of ``document`` (on success) or ``reason`` (on failure) is
    meaningful; ``status_code`` is set whenever an HTTP response was received.
    """

    url: str | None = None
    ok: bool
    document: Any = None
    reason: ProbeFailureReason | None = None
    status_code: int | None = None

    @classmethod
    def success(cls, url: str, document: Any, status_code: int) -> "ProbeResult":
        return cls(url=url, ok=True, document=document, status_code=status_code)

    @classmethod
    def failure(
        cls,
        reason: ProbeFailureReason,
        url: str | None = None,
        status_code: int | None = None,
    ) -> "ProbeResult":
        return cls(url=url, ok=False, reason=reason, status_code=status_code)

    def describe(self) -> str:
        """Human-readable failure description."""
        match self.reason:
            case ProbeFailureReason.INVALID_LINK:
                return "Invalid instance link"
            case ProbeFailureReason.UNREACHABLE if self.status_code is not None:
                return f"Instance metadata unreachable (status {self.status_code})"
            case ProbeFailureReason.UNREACHABLE:
                return "Instance metadata unreachable"
            case ProbeFailureReason.EMPTY_RESPONSE:
                return "Instance metadata endpoint returned empty response"
            case ProbeFailureReason.INVALID_JSON:
                return "Instance metadata endpoint returned invalid JSON"
            case ProbeFailureReason.TIMEOUT:
                return "Failed to verify instance metadata: timeout"
            case _:
                return "Instance metadata verified"
