"""Status enums and state constants for concept-poster.

This module contains the state definitions used by the upload engine,
the orchestrator and the platform adapters:
- Upload phases and engine states
- Remote container status codes
- Platform identifiers and video origins

Upload engine workflow:
    IDLE -> SESSION_STARTING -> TRANSFERRING -> FINISHING -> POLLING -> PUBLISHING -> DONE
                 |                   |              |           |            |
                 v                   v              v           v            v
               FAILED              FAILED         FAILED      FAILED       FAILED
"""

from enum import Enum
from typing import Final


# =============================================================================
# UPLOAD ENGINE
# =============================================================================

class UploadPhase(str, Enum):
    """Protocol phase that a request (or failure) belongs to."""

    START = "start"
    CHUNK = "chunk"
    FINISH = "finish"
    POLL = "poll"
    PUBLISH = "publish"


class UploadState(str, Enum):
    """States of the resumable upload state machine."""

    IDLE = "idle"
    SESSION_STARTING = "session_starting"
    TRANSFERRING = "transferring"
    FINISHING = "finishing"
    POLLING = "polling"
    PUBLISHING = "publishing"
    DONE = "done"
    FAILED = "failed"


class ChunkFailureKind(str, Enum):
    """How a failed chunk write is handled."""

    DESYNC = "desync"
    """Server expects a different offset; resume from there."""

    RETRYABLE = "retryable"
    """Transient failure; retry the same chunk after a backoff."""

    FATAL = "fatal"
    """Abort the whole upload."""


CONTAINER_SUCCESS_STATUSES: Final[frozenset[str]] = frozenset({"FINISHED", "PUBLISHED"})
"""Container status codes meaning the media is ready to publish."""

CONTAINER_PENDING_STATUSES: Final[frozenset[str]] = frozenset({"IN_PROGRESS", "PROCESSING", "UPLOADING"})
"""Container status codes meaning processing is still running."""

TRANSIENT_ERROR_TYPES: Final[frozenset[str]] = frozenset({
    "ProcessingFailedError",
    "TransientError",
    "UploadTimeoutError",
    "ServiceUnavailableError",
    "RateLimitError",
})
"""Named rupload error types that are retried in place."""


# =============================================================================
# PLATFORMS AND LOCATIONS
# =============================================================================

class Platform(str, Enum):
    """Publishing destinations, named as in the concept config."""

    YOUTUBE = "YouTube"
    TIKTOK = "TikTok"
    INSTAGRAM = "Instagram"

    @classmethod
    def parse(cls, value: str) -> "Platform":
        """Look up a platform by name, ignoring case."""
        for platform in cls:
            if platform.value.lower() == value.strip().lower():
                return platform
        valid = ", ".join(p.value for p in cls)
        raise ValueError(f"Unknown platform: {value}. Available: {valid}")


class VideoOrigin(str, Enum):
    """Folder a selected video was found in."""

    QUEUE = "queue"
    POSTED = "posted"


class SelectionPolicy(str, Enum):
    """How a video is picked from the queue when none is requested."""

    OLDEST = "oldest"
    RANDOM = "random"
