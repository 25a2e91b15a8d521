"""Direct Instagram uploads and replays, bypassing the orchestrator."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from ...config import Settings, get_settings
from ...core import Failure, Result, Success
from ...http import HttpTransport, HttpxTransport
from ...platforms.instagram.caption import sanitize_caption
from ...storage import FileStore, StoreError
from ...upload import (
    ReplayArtifact,
    ReplayRecorder,
    ResumableUploadEngine,
    UploadOptions,
    UploadOutcome,
    UploadRequest,
)
from ...upload.engine import SleepFn
from ..core.runtime import build_repository
from .params import InstagramUploadParams

_logger = logging.getLogger("instagram_api")


class InstagramUploadService:
    """Runs the resumable upload engine for a local file or a replay artifact."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[HttpTransport] = None,
        store: Optional[FileStore] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._settings = settings or get_settings()
        self._transport = transport
        self._store = store
        self._sleep = sleep

    async def _run_engine(self, request: UploadRequest, recorder: Optional[ReplayRecorder]) -> UploadOutcome:
        transport = self._transport or HttpxTransport()
        try:
            engine = ResumableUploadEngine(
                transport,
                options=UploadOptions.from_settings(self._settings),
                sleep=self._sleep,
            )
            outcome = await engine.upload(request)
        finally:
            if self._transport is None:
                await transport.aclose()

        if recorder is not None:
            try:
                recorder.record(request, outcome)
            except OSError as e:
                _logger.warning(f"Could not write replay artifact: {e}")
        return outcome

    async def upload(self, params: InstagramUploadParams) -> Result[UploadOutcome]:
        try:
            video = params.video_path.read_bytes()
        except OSError as e:
            return Failure(f"Could not read video: {e}", {"path": str(params.video_path)})

        request = UploadRequest(
            account_id=params.account_id,
            access_token=params.access_token,
            video=video,
            caption=sanitize_caption(params.caption),
            entity_name=params.video_path.name,
            is_ai_generated=params.is_ai_generated,
            cover_url=params.cover_url,
            thumb_offset_ms=params.thumb_offset_ms,
            width=params.width,
            height=params.height,
            duration_seconds=params.duration_seconds,
            share_to_feed=params.share_to_feed,
        )
        recorder = ReplayRecorder.from_setting(self._settings.instagram_replay_dir)
        return Success(await self._run_engine(request, recorder))

    async def replay(
        self,
        path: Path,
        access_token: Optional[str] = None,
        video_path: Optional[Path] = None,
    ) -> Result[UploadOutcome]:
        """Re-run a recorded upload.

        The video comes from `video_path` when given, else it is downloaded
        from the store by its recorded id. The token comes from
        `access_token`, else from instagram_accounts.json. A replay is only
        recorded again when INSTAGRAM_REPLAY_DIR is set explicitly.
        """
        try:
            artifact = ReplayArtifact.load(path)
        except (OSError, ValueError, TypeError) as e:
            return Failure(f"Could not read replay file: {e}", {"path": str(path)})
        metadata = artifact.metadata

        repository = None
        if not access_token or video_path is None:
            try:
                repository = build_repository(self._settings, self._store)
            except StoreError as e:
                return Failure(str(e))

        try:
            if not access_token:
                accounts = await repository.load_instagram_accounts()
                account = next((a for a in accounts if a.id == metadata.instagram_account_id), None)
                if account is None or not account.page_access_token:
                    return Failure(
                        "No access token. Provide IG_ACCESS_TOKEN or connect the account.",
                        {"account_id": metadata.instagram_account_id},
                    )
                access_token = account.page_access_token

            if video_path is not None:
                video = video_path.read_bytes()
            elif metadata.video_id:
                video = await repository.download_video(metadata.video_id)
            else:
                return Failure("Replay metadata has no video id. Pass --video with a local file.")
        except StoreError as e:
            return Failure(f"Store error: {e}")
        except OSError as e:
            return Failure(f"Could not read video: {e}")

        _logger.info(
            f"Replaying {path.name} | account={metadata.instagram_account_id} | "
            f"recorded={metadata.video_bytes} bytes | now={len(video)} bytes"
        )
        recorder = None
        if self._settings.instagram_replay_dir:
            recorder = ReplayRecorder.from_setting(self._settings.instagram_replay_dir)
        return Success(await self._run_engine(metadata.to_request(access_token, video), recorder))
