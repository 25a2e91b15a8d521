"""Instagram Reels publisher.

Builds the caption, hands the bytes to the resumable upload engine and
turns the engine outcome into a PostResult. Optionally records a replay
artifact for every attempt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ...http import HttpTransport
from ...upload import (
    ReplayRecorder,
    ResumableUploadEngine,
    UploadOptions,
    UploadOutcome,
    UploadRequest,
)
from ...upload.engine import SleepFn
from ..base import PlatformPublisher, PostRequest, PostResult, ProgressCallback
from .caption import build_caption, sanitize_caption
from .config import InstagramConfig

_logger = logging.getLogger("instagram_api")


class InstagramPublisher(PlatformPublisher):
    """Instagram publisher implementing the platform interface."""

    def __init__(
        self,
        config: InstagramConfig,
        transport: HttpTransport,
        options: Optional[UploadOptions] = None,
        sleep: SleepFn = asyncio.sleep,
        recorder: Optional[ReplayRecorder] = None,
        progress_callback: ProgressCallback = None,
    ):
        super().__init__(config, progress_callback)
        self._config: InstagramConfig = config
        self._recorder = recorder
        options = options or UploadOptions(graph_api_version=config.graph_api_version)
        self._engine = ResumableUploadEngine(transport, options=options, sleep=sleep)

    @property
    def platform_name(self) -> str:
        return "Instagram"

    def build_upload_request(self, request: PostRequest) -> UploadRequest:
        caption = sanitize_caption(build_caption(request.title, request.description, request.hashtags))
        return UploadRequest(
            account_id=self._config.account_id,
            access_token=self._config.access_token,
            video=request.video,
            caption=caption,
            entity_name=request.file_name,
            mime_type=request.mime_type,
            is_ai_generated=request.ai_generated,
            cover_url=request.cover_url,
            thumb_offset_ms=request.thumb_offset_ms or 0,
            width=request.width,
            height=request.height,
            duration_seconds=request.duration_seconds,
            share_to_feed=self._config.share_to_feed,
            video_id=request.video_id,
        )

    async def publish(self, request: PostRequest) -> PostResult:
        valid, message = self._config.validate()
        if not valid:
            return self._make_result(False, "Instagram credentials are incomplete", error=message)

        upload_request = self.build_upload_request(request)
        await self._emit_progress("upload", 0.0, f"Uploading {request.file_name} ({request.size} bytes)")

        outcome = await self._engine.upload(upload_request)
        self._record(upload_request, outcome)

        if not outcome.success:
            await self._emit_progress("failed", 1.0, str(outcome))
            return self._make_result(
                False,
                f"Instagram upload failed during {outcome.phase.value}",
                error=str(outcome.error),
                phase=outcome.phase.value,
                retryable=outcome.retryable,
            )

        await self._emit_progress("done", 1.0, f"Published {outcome.media_id}")
        _logger.info(f"Published to Instagram | account={self._config.account_id} | media_id={outcome.media_id}")
        return self._make_result(
            True,
            "Successfully posted to Instagram.",
            media_id=outcome.media_id,
            creation_id=outcome.creation_id,
            resyncs=outcome.resyncs,
        )

    def _record(self, request: UploadRequest, outcome: UploadOutcome) -> None:
        if self._recorder is None:
            return
        try:
            self._recorder.record(request, outcome)
        except OSError as e:
            _logger.warning(f"Could not write replay artifact: {e}")
