"""TikTok adapter (init / upload / status)."""

from .config import TikTokConfig
from .errors import TikTokAPIError
from .publisher import TikTokPublisher, plan_tiktok_chunks
from .tokens import ensure_fresh_tokens, needs_refresh, refresh_tokens

__all__ = [
    "TikTokAPIError",
    "TikTokConfig",
    "TikTokPublisher",
    "ensure_fresh_tokens",
    "needs_refresh",
    "plan_tiktok_chunks",
    "refresh_tokens",
]
