"""Data types for the resumable chunked upload protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from ..constants import (
    GRAPH_API_VERSION,
    UPLOAD_CHUNK_SIZE,
    UPLOAD_DEFAULT_HEIGHT,
    UPLOAD_DEFAULT_WIDTH,
    UPLOAD_MAX_CHUNK_ATTEMPTS,
    UPLOAD_MAX_POLL_ATTEMPTS,
    UPLOAD_MAX_RESYNCS,
    UPLOAD_POLL_INTERVAL_SECONDS,
    UPLOAD_RESYNC_DELAY_SECONDS,
    UPLOAD_RETRY_BASE_DELAY_SECONDS,
    UploadPhase,
)

if TYPE_CHECKING:
    from ..config import Settings
    from .errors import UploadError


# =============================================================================
# CHUNK PLANNING
# =============================================================================

@dataclass(frozen=True)
class ChunkRange:
    """One contiguous slice of the video.

    `end` is exclusive; the Content-Range header uses the inclusive form.
    """

    index: int
    start: int
    end: int
    total: int

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_last(self) -> bool:
        return self.end >= self.total

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end - 1}/{self.total}"


def chunk_at(offset: int, total: int, chunk_size: int = UPLOAD_CHUNK_SIZE) -> ChunkRange:
    """Build the chunk starting at `offset`.

    The chunk index is derived from the offset, so resuming at a
    server-reported offset keeps sequence numbers consistent.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if not 0 <= offset < total:
        raise ValueError(f"offset {offset} outside [0, {total})")
    return ChunkRange(
        index=offset // chunk_size,
        start=offset,
        end=min(offset + chunk_size, total),
        total=total,
    )


def plan_chunks(total: int, chunk_size: int = UPLOAD_CHUNK_SIZE, start: int = 0) -> list[ChunkRange]:
    """Split [start, total) into consecutive chunks.

    Example:
        >>> [c.length for c in plan_chunks(10_000_000)]
        [4194304, 4194304, 1611392]
    """
    chunks = []
    offset = start
    while offset < total:
        chunk = chunk_at(offset, total, chunk_size)
        chunks.append(chunk)
        offset = chunk.end
    return chunks


# =============================================================================
# ENGINE INPUT AND SETTINGS
# =============================================================================

@dataclass(frozen=True)
class UploadRequest:
    """Everything the engine needs to publish one video to one account."""

    account_id: str
    access_token: str
    video: bytes
    caption: str
    entity_name: str = ""
    mime_type: str = "video/mp4"
    is_ai_generated: bool = False
    cover_url: Optional[str] = None
    thumb_offset_ms: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    duration_seconds: Optional[float] = None
    share_to_feed: bool = True
    video_id: Optional[str] = None

    @property
    def total_bytes(self) -> int:
        return len(self.video)

    def media_spec(self) -> dict[str, int]:
        """Dimensions (and duration when known) for upload_media_spec."""
        spec = {
            "original_width": self.width or UPLOAD_DEFAULT_WIDTH,
            "original_height": self.height or UPLOAD_DEFAULT_HEIGHT,
        }
        if self.duration_seconds and self.duration_seconds > 0:
            spec["duration_ms"] = int(round(self.duration_seconds * 1000))
        return spec


@dataclass(frozen=True)
class UploadOptions:
    """Tunable protocol parameters."""

    chunk_size: int = UPLOAD_CHUNK_SIZE
    max_chunk_attempts: int = UPLOAD_MAX_CHUNK_ATTEMPTS
    retry_base_delay: float = UPLOAD_RETRY_BASE_DELAY_SECONDS
    resync_delay: float = UPLOAD_RESYNC_DELAY_SECONDS
    max_resyncs: int = UPLOAD_MAX_RESYNCS
    poll_interval: float = UPLOAD_POLL_INTERVAL_SECONDS
    max_poll_attempts: int = UPLOAD_MAX_POLL_ATTEMPTS
    graph_api_version: str = GRAPH_API_VERSION

    @property
    def video_base_url(self) -> str:
        """Host for start, finish and status calls."""
        return f"https://graph-video.facebook.com/{self.graph_api_version}"

    @property
    def graph_base_url(self) -> str:
        """Host for media_publish."""
        return f"https://graph.facebook.com/{self.graph_api_version}"

    @classmethod
    def from_settings(cls, settings: "Settings") -> "UploadOptions":
        return cls(
            chunk_size=settings.upload_chunk_size,
            max_chunk_attempts=settings.upload_max_chunk_attempts,
            retry_base_delay=settings.upload_retry_base_delay,
            poll_interval=settings.upload_poll_interval,
            max_poll_attempts=settings.upload_max_poll_attempts,
            graph_api_version=settings.graph_api_version,
        )


# =============================================================================
# SESSION AND OUTCOME
# =============================================================================

@dataclass
class UploadSession:
    """Mutable state of one upload, owned by a single engine run.

    Invariant: 0 <= offset <= total. The offset only moves forward on an
    acknowledged chunk and may move backward on a server-reported offset.
    """

    session_id: str
    upload_url: str
    total: int
    entity_name: str
    media_spec: dict[str, int] = field(default_factory=dict)
    is_ai_generated: bool = False
    offset: int = 0
    chunk_index: int = 0
    resyncs: int = 0
    chunks_sent: int = 0

    @property
    def complete(self) -> bool:
        return self.offset >= self.total

    def acknowledge(self, chunk: ChunkRange) -> None:
        """Advance past an acknowledged chunk."""
        if chunk.start != self.offset:
            raise ValueError(f"chunk starts at {chunk.start}, session is at {self.offset}")
        self.offset = chunk.end
        self.chunk_index = chunk.index + 1
        self.chunks_sent += 1

    def resync(self, server_offset: int, chunk_size: int) -> None:
        """Jump to the offset the server says it expects."""
        if not 0 <= server_offset <= self.total:
            raise ValueError(f"server offset {server_offset} outside [0, {self.total}]")
        self.offset = server_offset
        self.chunk_index = server_offset // chunk_size
        self.resyncs += 1


@dataclass
class UploadOutcome:
    """Terminal result of one engine run."""

    success: bool
    phase: UploadPhase
    creation_id: Optional[str] = None
    media_id: Optional[str] = None
    publish_response: dict[str, Any] = field(default_factory=dict)
    error: Optional["UploadError"] = None
    session_id: Optional[str] = None
    bytes_sent: int = 0
    resyncs: int = 0

    @property
    def retryable(self) -> bool:
        return bool(self.error and self.error.retryable)

    def __str__(self) -> str:
        if self.success:
            return f"Published media {self.media_id} (creation {self.creation_id})"
        return f"Upload failed during {self.phase.value}: {self.error}"
