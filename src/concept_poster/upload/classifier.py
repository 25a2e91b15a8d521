"""Classification of failed chunk writes.

A rejected chunk is one of three things:

- DESYNC: the server reports an offset different from ours. We jump to
  the server's offset and keep going; this does not use up retries.
- RETRYABLE: a transient failure (5xx, a named transient error type, an
  explicit retriable flag, or a transient Graph error code).
- FATAL: anything else.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

from ..constants import TRANSIENT_ERROR_TYPES, ChunkFailureKind

# Graph API error codes that are safe to retry after a pause
GRAPH_ERROR_CODES: dict[int, dict[str, Any]] = {
    1: {"name": "API_UNKNOWN", "is_retryable": True},
    2: {"name": "API_SERVICE", "is_retryable": True},
    4: {"name": "API_TOO_MANY_CALLS", "is_retryable": True},
    17: {"name": "API_USER_TOO_MANY_CALLS", "is_retryable": True},
    32: {"name": "PAGE_RATE_LIMIT", "is_retryable": True},
    190: {"name": "ACCESS_TOKEN_EXPIRED", "is_retryable": False},
    613: {"name": "RATE_LIMIT_EXCEEDED", "is_retryable": True},
    2207026: {"name": "MEDIA_NOT_READY", "is_retryable": True},
    2207032: {"name": "MEDIA_UPLOAD_FAILED", "is_retryable": True},
}

_OFFSET_KEYS = ("offset", "expected_offset", "server_offset")

_OFFSET_PATTERNS = (
    re.compile(r"maximum\s+accepted\s+offset\D{0,20}?(\d+)", re.IGNORECASE),
    re.compile(r"expected\s+offset\D{0,20}?(\d+)", re.IGNORECASE),
    re.compile(r"offset\s+mismatch\D{0,40}?(\d+)", re.IGNORECASE),
)


@dataclass(frozen=True)
class ChunkFailure:
    """Result of classifying one rejected chunk."""

    kind: ChunkFailureKind
    message: str
    status_code: Optional[int] = None
    error_code: Optional[int | str] = None
    server_offset: Optional[int] = None


def error_message(payload: Any, text: str = "") -> str:
    """Best-effort human-readable message from an error payload."""
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            message = error.get("error_user_msg") or error.get("message")
            if message:
                return str(message)
        elif isinstance(error, str) and error:
            return error
        debug = payload.get("debug_info")
        if isinstance(debug, dict) and debug.get("message"):
            return str(debug["message"])
        if payload.get("message"):
            return str(payload["message"])
    return text.strip()[:500] or "Unknown error"


def parse_server_offset(payload: Any, text: str = "") -> Optional[int]:
    """Extract the offset the server expects, if the response names one.

    Looks for explicit offset fields at the top level and inside
    `error`/`debug_info`, then falls back to messages like
    "maximum accepted offset 4194304".
    """
    if isinstance(payload, dict):
        for container in (payload, payload.get("error"), payload.get("debug_info")):
            if not isinstance(container, dict):
                continue
            for key in _OFFSET_KEYS:
                value = _as_int(container.get(key))
                if value is not None:
                    return value

    haystacks = [text]
    if payload is not None:
        haystacks.append(error_message(payload))
    for haystack in haystacks:
        for pattern in _OFFSET_PATTERNS:
            match = pattern.search(haystack or "")
            if match:
                return int(match.group(1))
    return None


def is_transient_payload(payload: Any) -> bool:
    """Check the payload for a transient marker."""
    if not isinstance(payload, dict):
        return False

    for container in (payload, payload.get("error"), payload.get("debug_info")):
        if not isinstance(container, dict):
            continue
        if container.get("retriable") is True or container.get("is_transient") is True:
            return True
        if container.get("type") in TRANSIENT_ERROR_TYPES:
            return True

    error = payload.get("error")
    if isinstance(error, dict):
        code = _as_int(error.get("error_subcode")) or _as_int(error.get("code"))
        info = GRAPH_ERROR_CODES.get(code) if code is not None else None
        if info and info["is_retryable"]:
            return True
    return False


def classify_chunk_failure(
    status_code: Optional[int],
    payload: Any,
    text: str,
    local_offset: int,
    total: int,
) -> ChunkFailure:
    """Decide how to handle a rejected chunk.

    Args:
        status_code: HTTP status, or None for a network failure.
        payload: Decoded JSON body (None if not JSON).
        text: Raw body text.
        local_offset: Offset the chunk was sent at.
        total: Total upload length.

    Returns:
        ChunkFailure with the kind and, for desyncs, the server offset.
    """
    message = error_message(payload, text)
    error_code = None
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        error_code = payload["error"].get("code")

    server_offset = parse_server_offset(payload, text)
    if server_offset is not None and server_offset != local_offset and 0 <= server_offset <= total:
        return ChunkFailure(
            kind=ChunkFailureKind.DESYNC,
            message=message,
            status_code=status_code,
            error_code=error_code,
            server_offset=server_offset,
        )

    if status_code is None or status_code >= 500 or is_transient_payload(payload):
        kind = ChunkFailureKind.RETRYABLE
    else:
        kind = ChunkFailureKind.FATAL

    return ChunkFailure(kind=kind, message=message, status_code=status_code, error_code=error_code)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None
