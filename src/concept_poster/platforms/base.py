"""Abstract base classes for platform publishers.

Every adapter takes the same PostRequest and returns a PostResult. An
adapter reports its own failures in the result instead of raising, so one
platform going wrong never stops the others.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

if TYPE_CHECKING:
    from ..concepts import ConceptConfig
    from ..config import Settings


@dataclass(frozen=True)
class PostRequest:
    """Platform-independent description of one post."""

    video: bytes
    file_name: str
    mime_type: str = "video/mp4"
    title: str = ""
    description: str = ""
    hashtags: str = ""
    ai_generated: bool = False
    cover_url: Optional[str] = None
    thumb_offset_ms: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    duration_seconds: Optional[float] = None
    video_id: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.video)


@dataclass
class PostResult:
    """Outcome of publishing to one platform."""

    success: bool
    platform: str
    message: str
    error: Optional[str] = None
    media_id: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        if self.success:
            return f"[{self.platform}] {self.message}"
        return f"[{self.platform}] {self.message}: {self.error}"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.error:
            data["error"] = self.error
        if self.media_id:
            data["media_id"] = self.media_id
        return data


@dataclass
class PlatformConfig(ABC):
    """Base configuration for any platform.

    Concrete configs are built from a concept record plus process settings.
    """

    platform: str
    enabled: bool = True

    @classmethod
    @abstractmethod
    def from_concept(
        cls,
        concept: "ConceptConfig",
        settings: "Settings",
        **context: Any,
    ) -> "PlatformConfig":
        """Build the config for one concept.

        Args:
            concept: Parsed config.json of the concept.
            settings: Process settings (OAuth client ids and secrets).
            **context: Platform-specific extras (e.g. Instagram accounts).
        """
        ...

    @abstractmethod
    def validate(self) -> tuple[bool, str]:
        """Check required credentials are present.

        Returns:
            Tuple of (is_valid, error_message).
        """
        ...


# Type for progress callbacks: (stage, fraction 0-1, message)
ProgressCallback = Callable[[str, float, str], Awaitable[None]] | None


class PlatformPublisher(ABC):
    """Abstract base class for platform publishers."""

    def __init__(
        self,
        config: PlatformConfig,
        progress_callback: ProgressCallback = None,
    ):
        self.config = config
        self._progress_callback = progress_callback

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Display name used as the key of the result map."""
        ...

    @abstractmethod
    async def publish(self, request: PostRequest) -> PostResult:
        """Publish one video. Must not raise for platform errors."""
        ...

    async def check_credentials(self) -> tuple[bool, str]:
        return self.config.validate()

    async def _emit_progress(self, stage: str, progress: float, message: str) -> None:
        """Emit a progress update if callback is set."""
        if self._progress_callback:
            await self._progress_callback(stage, progress, message)

    def _make_result(
        self,
        success: bool,
        message: str,
        error: Optional[str] = None,
        media_id: Optional[str] = None,
        **details: Any,
    ) -> PostResult:
        """Create a PostResult for this platform."""
        return PostResult(
            success=success,
            platform=self.platform_name,
            message=message,
            error=error,
            media_id=media_id,
            details=details,
        )
