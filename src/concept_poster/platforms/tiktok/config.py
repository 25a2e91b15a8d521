"""TikTok platform configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ...concepts import TikTokTokens
from ..base import PlatformConfig

if TYPE_CHECKING:
    from ...concepts import ConceptConfig
    from ...config import Settings


@dataclass
class TikTokConfig(PlatformConfig):
    """TikTok-specific configuration.

    The token pair lives in the concept record (apiKeys.tiktok); the app
    credentials come from TIKTOK_CLIENT_KEY / TIKTOK_CLIENT_SECRET.

    TikTok API Setup:
    1. Create app at https://developers.tiktok.com/
    2. Request 'video.publish' scope approval
    3. Complete OAuth flow to get the token pair
    4. Pass audit for public visibility (posts are private until audit)
    """

    platform: str = "tiktok"

    client_key: str = ""
    client_secret: str = ""
    tokens: TikTokTokens = field(default_factory=TikTokTokens)

    api_base_url: str = "https://open.tiktokapis.com/v2"
    privacy_level: str = "SELF_ONLY"

    @classmethod
    def from_concept(
        cls,
        concept: "ConceptConfig",
        settings: "Settings",
        **context: Any,
    ) -> "TikTokConfig":
        tokens = concept.api_keys.tiktok or TikTokTokens()
        return cls(
            enabled=bool(concept.platforms.get("TikTok", True)),
            client_key=settings.tiktok_client_key,
            client_secret=settings.tiktok_client_secret,
            tokens=tokens.model_copy(),
        )

    def validate(self) -> tuple[bool, str]:
        """Validate that all required credentials are present.

        Returns:
            Tuple of (is_valid, error_message).
        """
        missing = []

        if not self.tokens.refresh_token:
            missing.append("apiKeys.tiktok.refresh_token")
        if not self.client_key:
            missing.append("TIKTOK_CLIENT_KEY")
        if not self.client_secret:
            missing.append("TIKTOK_CLIENT_SECRET")

        if missing:
            return False, f"Missing TikTok credentials: {', '.join(missing)}"

        return True, "OK"
