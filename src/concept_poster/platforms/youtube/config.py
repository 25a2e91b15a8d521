"""YouTube platform configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from ..base import PlatformConfig

if TYPE_CHECKING:
    from ...concepts import ConceptConfig
    from ...config import Settings

YOUTUBE_SCOPES = [
    "https://www.googleapis.com/auth/youtube.upload",
]


@dataclass
class YouTubeConfig(PlatformConfig):
    """YouTube channel selected by a concept.

    The refresh token is stored per concept (apiKeys.youtube_refresh_token);
    the OAuth client comes from GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET.
    """

    platform: str = "youtube"
    refresh_token: str = ""
    client_id: str = ""
    client_secret: str = ""
    token_uri: str = "https://oauth2.googleapis.com/token"
    channel_id: Optional[str] = None
    channel_name: Optional[str] = None
    privacy_status: str = "private"

    @classmethod
    def from_concept(
        cls,
        concept: "ConceptConfig",
        settings: "Settings",
        **context: Any,
    ) -> "YouTubeConfig":
        keys = concept.api_keys
        return cls(
            enabled=bool(concept.platforms.get("YouTube", True)),
            refresh_token=keys.youtube_refresh_token or "",
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            channel_id=keys.youtube_channel_id,
            channel_name=keys.youtube_channel_name,
        )

    def validate(self) -> tuple[bool, str]:
        missing = []
        if not self.refresh_token:
            missing.append("apiKeys.youtube_refresh_token")
        if not self.client_id:
            missing.append("GOOGLE_CLIENT_ID")
        if not self.client_secret:
            missing.append("GOOGLE_CLIENT_SECRET")
        if missing:
            return False, f"Missing YouTube credentials: {', '.join(missing)}"
        return True, "OK"
