"""TikTok platform publisher.

Implements the TikTok Content Posting API (direct post, FILE_UPLOAD):

    1. refresh   POST /v2/oauth/token/                 (only when close to expiry)
    2. init      POST /v2/post/publish/video/init/
    3. upload    PUT  {upload_url}                     one PUT per chunk
    4. status    POST /v2/post/publish/status/fetch/

API Reference:
- https://developers.tiktok.com/doc/content-posting-api-get-started
- https://developers.tiktok.com/doc/content-posting-api-reference-direct-post
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ...constants import TIKTOK_CHUNK_THRESHOLD, TIKTOK_MAX_CHUNK_SIZE, TIKTOK_MAX_VIDEO_SIZE, TIMEOUT_HTTP_UPLOAD
from ...http import HttpTransport, HttpTransportError
from ..base import PlatformPublisher, PostRequest, PostResult, ProgressCallback
from .config import TikTokConfig
from .errors import TikTokAPIError
from .tokens import TokenPersistFn, ensure_fresh_tokens

_logger = logging.getLogger("tiktok_api")


def plan_tiktok_chunks(video_size: int) -> tuple[int, int]:
    """Chunk size and count for a FILE_UPLOAD.

    Videos up to the threshold go in one PUT. Larger ones use fixed
    64 MiB chunks; the remainder is folded into the last chunk.
    """
    if video_size <= TIKTOK_CHUNK_THRESHOLD:
        return video_size, 1
    return TIKTOK_MAX_CHUNK_SIZE, video_size // TIKTOK_MAX_CHUNK_SIZE


class TikTokPublisher(PlatformPublisher):
    """TikTok publisher implementing the platform interface.

    Note: Posts are private (SELF_ONLY) until the app passes TikTok's audit.
    """

    def __init__(
        self,
        config: TikTokConfig,
        transport: HttpTransport,
        on_tokens_refreshed: Optional[TokenPersistFn] = None,
        progress_callback: ProgressCallback = None,
    ):
        super().__init__(config, progress_callback)
        self._config: TikTokConfig = config
        self._http = transport
        self._on_tokens_refreshed = on_tokens_refreshed

    @property
    def platform_name(self) -> str:
        return "TikTok"

    async def _make_request(self, endpoint: str, json_data: dict[str, Any]) -> dict[str, Any]:
        """POST JSON to the TikTok API.

        Raises:
            TikTokAPIError: If the API returns an error.
        """
        url = endpoint if endpoint.startswith("http") else f"{self._config.api_base_url}/{endpoint}"
        _logger.info(f"TikTok API: POST {endpoint}")

        try:
            response = await self._http.request(
                "POST",
                url,
                headers={
                    "Authorization": f"Bearer {self._config.tokens.access_token}",
                    "Content-Type": "application/json; charset=UTF-8",
                },
                json_body=json_data,
            )
        except HttpTransportError as e:
            raise TikTokAPIError(f"Network error calling {endpoint}: {e}") from e

        payload = response.json()
        error = payload.get("error") if isinstance(payload, dict) else None
        error = error if isinstance(error, dict) else {}
        code = error.get("code")

        if response.ok and code in (None, "", "ok"):
            return payload if isinstance(payload, dict) else {}

        raise TikTokAPIError(
            message=error.get("message") or f"HTTP {response.status_code}: {response.text[:200]}",
            error_code=code,
            log_id=error.get("log_id"),
        )

    async def _init_video_upload(self, request: PostRequest) -> dict[str, Any]:
        """Initialize a direct post and get the upload URL."""
        chunk_size, chunk_count = plan_tiktok_chunks(request.size)
        description = request.description
        if request.hashtags:
            description = f"{description}\n\n{request.hashtags}"

        result = await self._make_request(
            "post/publish/video/init/",
            {
                "post_info": {
                    "title": request.title,
                    "description": description,
                    "privacy_level": self._config.privacy_level,
                    "ai_generated_content": request.ai_generated,
                    "disable_duet": False,
                    "disable_comment": False,
                    "disable_stitch": False,
                },
                "source_info": {
                    "source": "FILE_UPLOAD",
                    "video_size": request.size,
                    "chunk_size": chunk_size,
                    "total_chunk_count": chunk_count,
                },
            },
        )
        data = result.get("data") or {}
        if not data.get("upload_url") or not data.get("publish_id"):
            raise TikTokAPIError("Init response missing upload_url or publish_id")
        return data

    async def _upload_video(self, upload_url: str, request: PostRequest) -> None:
        """PUT the video bytes, one request per planned chunk."""
        total = request.size
        chunk_size, chunk_count = plan_tiktok_chunks(total)

        for index in range(chunk_count):
            start = index * chunk_size
            end = total if index == chunk_count - 1 else start + chunk_size
            body = request.video[start:end]
            try:
                response = await self._http.request(
                    "PUT",
                    upload_url,
                    headers={
                        "Content-Range": f"bytes {start}-{end - 1}/{total}",
                        "Content-Type": request.mime_type,
                    },
                    content=body,
                    timeout=TIMEOUT_HTTP_UPLOAD,
                )
            except HttpTransportError as e:
                raise TikTokAPIError(f"Video upload failed: {e}") from e

            if not response.ok:
                raise TikTokAPIError(f"Video upload failed: HTTP {response.status_code}: {response.text[:200]}")

            await self._emit_progress("upload", (index + 1) / chunk_count, f"Chunk {index + 1}/{chunk_count}")
            _logger.debug(f"TikTok chunk {index + 1}/{chunk_count} uploaded ({len(body)} bytes)")

    async def _check_publish_status(self, publish_id: str) -> dict[str, Any]:
        result = await self._make_request("post/publish/status/fetch/", {"publish_id": publish_id})
        return result.get("data") or {}

    async def publish(self, request: PostRequest) -> PostResult:
        valid, message = self._config.validate()
        if not valid:
            return self._make_result(False, "TikTok credentials are incomplete", error=message)

        if request.size == 0:
            return self._make_result(False, "Video is empty", error="0 bytes")
        if request.size > TIKTOK_MAX_VIDEO_SIZE:
            return self._make_result(False, "Video too large for TikTok", error=f"{request.size} bytes")

        try:
            self._config.tokens = await ensure_fresh_tokens(
                self._http,
                self._config.tokens,
                self._config.client_key,
                self._config.client_secret,
                persist=self._on_tokens_refreshed,
            )

            init = await self._init_video_upload(request)
            publish_id = init["publish_id"]
            _logger.info(f"TikTok upload initialized | publish_id={publish_id}")

            await self._upload_video(init["upload_url"], request)

            status = await self._check_publish_status(publish_id)
            if status.get("status") == "FAILED":
                reason = status.get("fail_reason") or "unknown reason"
                return self._make_result(
                    False, "TikTok rejected the post", error=reason, publish_id=publish_id
                )

        except TikTokAPIError as e:
            _logger.error(f"TikTok publish failed: {e} (code={e.error_code}, log_id={e.log_id})")
            return self._make_result(
                False, "Failed to post to TikTok", error=str(e), error_code=e.error_code, log_id=e.log_id
            )

        _logger.info(f"Posted to TikTok | publish_id={publish_id} | status={status.get('status')}")
        return self._make_result(
            True,
            "Successfully posted to TikTok.",
            media_id=publish_id,
            status=status.get("status"),
        )
