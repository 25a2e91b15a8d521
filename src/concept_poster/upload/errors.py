"""Upload engine errors."""

from __future__ import annotations

from typing import Any, Optional

from ..constants import UploadPhase


class UploadError(Exception):
    """Failure of the resumable upload protocol.

    Attributes:
        phase: Protocol phase the failure happened in.
        message: Remote (or local) error message.
        status_code: HTTP status of the failing response, if any.
        error_code: Platform error code, if the response carried one.
        retryable: True when the cause was transient (5xx, timeouts,
            named transient errors), even if the retry budget ran out.
    """

    def __init__(
        self,
        phase: UploadPhase,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[int | str] = None,
        retryable: bool = False,
        details: Optional[dict[str, Any]] = None,
    ):
        self.phase = phase
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.retryable = retryable
        self.details = details or {}
        super().__init__(str(self))

    def __str__(self) -> str:
        parts = [f"[{self.phase.value}] {self.message}"]
        if self.status_code is not None:
            parts.append(f"HTTP {self.status_code}")
        if self.error_code is not None:
            parts.append(f"code {self.error_code}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "message": self.message,
            "status_code": self.status_code,
            "error_code": self.error_code,
            "retryable": self.retryable,
        }
