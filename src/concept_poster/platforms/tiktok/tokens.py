"""TikTok OAuth token refresh."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from ...concepts import TikTokTokens
from ...constants import TIKTOK_REFRESH_THRESHOLD_SECONDS
from ...http import HttpTransport, HttpTransportError
from .errors import TikTokAPIError

_logger = logging.getLogger("tiktok_api")

TOKEN_ENDPOINT = "https://open.tiktokapis.com/v2/oauth/token/"

# Called with the merged tokens after a refresh that changed them
TokenPersistFn = Callable[[TikTokTokens], Awaitable[None]]


def needs_refresh(tokens: TikTokTokens, threshold: int = TIKTOK_REFRESH_THRESHOLD_SECONDS) -> bool:
    return tokens.expires_in < threshold


async def refresh_tokens(
    transport: HttpTransport,
    tokens: TikTokTokens,
    client_key: str,
    client_secret: str,
) -> TikTokTokens:
    """Exchange the refresh token for a new pair.

    Returns the old tokens overlaid with whatever the endpoint returned,
    so fields TikTok omits (display_name, username) survive.

    Raises:
        TikTokAPIError: If the endpoint rejects the refresh.
    """
    _logger.info("Refreshing TikTok access token")
    try:
        response = await transport.request(
            "POST",
            TOKEN_ENDPOINT,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            data={
                "client_key": client_key,
                "client_secret": client_secret,
                "grant_type": "refresh_token",
                "refresh_token": tokens.refresh_token,
            },
        )
    except HttpTransportError as e:
        raise TikTokAPIError(f"Token refresh failed: {e}") from e

    payload = response.json()
    if not response.ok or not isinstance(payload, dict) or not payload.get("access_token"):
        detail = None
        if isinstance(payload, dict):
            detail = payload.get("error_description") or payload.get("error")
        raise TikTokAPIError(
            f"Failed to refresh TikTok access token: {detail or f'HTTP {response.status_code}'}",
            error_code=payload.get("error") if isinstance(payload, dict) else None,
        )

    merged = {**tokens.to_json_dict(), **payload}
    return TikTokTokens.model_validate(merged)


async def ensure_fresh_tokens(
    transport: HttpTransport,
    tokens: TikTokTokens,
    client_key: str,
    client_secret: str,
    persist: Optional[TokenPersistFn] = None,
) -> TikTokTokens:
    """Refresh when close to expiry and persist only if anything changed."""
    if not needs_refresh(tokens):
        return tokens

    refreshed = await refresh_tokens(transport, tokens, client_key, client_secret)
    if refreshed.to_json_dict() != tokens.to_json_dict():
        if persist is not None:
            await persist(refreshed)
    else:
        _logger.debug("TikTok refresh returned identical tokens; not persisting")
    return refreshed
