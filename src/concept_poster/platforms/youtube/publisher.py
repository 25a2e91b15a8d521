"""YouTube publisher.

One `videos.insert` call through google-api-python-client. The video is
streamed from memory; the blocking client runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import io
import json
import logging
from typing import Any, Callable, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from ..base import PlatformPublisher, PostRequest, PostResult, ProgressCallback
from .config import YOUTUBE_SCOPES, YouTubeConfig

_logger = logging.getLogger("youtube_api")

# (credentials) -> youtube service resource
ServiceFactory = Callable[[Credentials], Any]


class YouTubeUploadError(Exception):
    """YouTube upload failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


def hashtags_to_tags(hashtags: str) -> list[str]:
    """Hashtag tokens without the leading '#', e.g. '#a #b plain' -> ['a', 'b']."""
    return [token[1:] for token in hashtags.split() if token.startswith("#") and len(token) > 1]


def _default_service(credentials: Credentials) -> Any:
    return build("youtube", "v3", credentials=credentials, cache_discovery=False)


def _http_error_detail(exc: HttpError) -> tuple[str, Optional[str]]:
    try:
        payload = json.loads(exc.content.decode("utf-8"))
    except (ValueError, AttributeError, UnicodeDecodeError):
        return str(exc), None
    error = payload.get("error", {}) if isinstance(payload, dict) else {}
    reasons = [
        str(item.get("reason"))
        for item in error.get("errors", [])
        if isinstance(item, dict) and item.get("reason")
    ]
    message = error.get("message") or str(exc)
    return message, reasons[0] if reasons else None


class YouTubePublisher(PlatformPublisher):
    """YouTube publisher implementing the platform interface."""

    def __init__(
        self,
        config: YouTubeConfig,
        service_factory: ServiceFactory = _default_service,
        progress_callback: ProgressCallback = None,
    ):
        super().__init__(config, progress_callback)
        self._config: YouTubeConfig = config
        self._service_factory = service_factory

    @property
    def platform_name(self) -> str:
        return "YouTube"

    def _credentials(self) -> Credentials:
        """Exchange the stored refresh token for an access token."""
        creds = Credentials(
            token=None,
            refresh_token=self._config.refresh_token,
            token_uri=self._config.token_uri,
            client_id=self._config.client_id,
            client_secret=self._config.client_secret,
            scopes=YOUTUBE_SCOPES,
        )
        try:
            creds.refresh(Request())
        except RefreshError as e:
            raise YouTubeUploadError(f"Failed to refresh YouTube access token: {e}") from e
        if not creds.token:
            raise YouTubeUploadError("Failed to refresh YouTube access token.")
        return creds

    def build_body(self, request: PostRequest) -> dict[str, Any]:
        status: dict[str, Any] = {
            "privacyStatus": self._config.privacy_status,
            "selfDeclaredMadeForKids": False,
        }
        if request.ai_generated:
            status["containsSyntheticMedia"] = True
        return {
            "snippet": {
                "title": request.title,
                "description": request.description,
                "tags": hashtags_to_tags(request.hashtags),
            },
            "status": status,
        }

    def _upload(self, request: PostRequest) -> dict[str, Any]:
        creds = self._credentials()
        youtube = self._service_factory(creds)
        media = MediaIoBaseUpload(
            io.BytesIO(request.video),
            mimetype=request.mime_type,
            chunksize=-1,
            resumable=True,
        )
        try:
            return youtube.videos().insert(
                part="snippet,status",
                body=self.build_body(request),
                media_body=media,
            ).execute()
        except HttpError as e:
            message, reason = _http_error_detail(e)
            status = getattr(e.resp, "status", None)
            raise YouTubeUploadError(message, status_code=status, reason=reason) from e

    async def publish(self, request: PostRequest) -> PostResult:
        valid, message = self._config.validate()
        if not valid:
            return self._make_result(False, "YouTube credentials are incomplete", error=message)

        _logger.info(f"Uploading {request.file_name} to YouTube ({request.size} bytes)")
        try:
            response = await asyncio.to_thread(self._upload, request)
        except YouTubeUploadError as e:
            _logger.error(f"YouTube upload failed: {e} (status={e.status_code}, reason={e.reason})")
            return self._make_result(
                False, "Failed to post to YouTube", error=str(e), status_code=e.status_code, reason=e.reason
            )

        video_id = response.get("id")
        _logger.info(f"Posted to YouTube | video_id={video_id}")
        return self._make_result(
            True,
            "Successfully posted to YouTube.",
            media_id=video_id,
            url=f"https://youtu.be/{video_id}" if video_id else None,
        )
