"""Resumable chunked upload engine for Instagram Reels.

Drives one video through the Graph API resumable protocol:

    1. start    POST {video host}/{ig_id}/media        upload_phase=start
    2. chunks   POST {upload_url}                      one per byte range
    3. finish   POST {video host}/{ig_id}/media        upload_phase=finish
    4. poll     GET  {video host}/{upload_session_id}  until FINISHED
    5. publish  POST {graph host}/{ig_id}/media_publish

The engine owns offset bookkeeping and chunk retry policy. It holds no
state between runs; every call to upload() creates a fresh session.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Optional

from ..constants import (
    CONTAINER_PENDING_STATUSES,
    CONTAINER_SUCCESS_STATUSES,
    TIMEOUT_HTTP_UPLOAD,
    ChunkFailureKind,
    UploadPhase,
    UploadState,
)
from ..core import Failure
from ..http import HttpResponse, HttpTransport, HttpTransportError
from .classifier import classify_chunk_failure
from .errors import UploadError
from .models import ChunkRange, UploadOptions, UploadOutcome, UploadRequest, UploadSession, chunk_at
from .responses import (
    FinishResponse,
    parse_finish_response,
    parse_publish_response,
    parse_start_response,
    parse_status_response,
)

_logger = logging.getLogger("upload_engine")

SleepFn = Callable[[float], Awaitable[Any]]


class ResumableUploadEngine:
    """Multi-phase resumable upload for one video against one account.

    Usage:
        async with HttpxTransport() as http:
            engine = ResumableUploadEngine(http)
            outcome = await engine.upload(request)
            if outcome.success:
                print(outcome.media_id)
    """

    def __init__(
        self,
        transport: HttpTransport,
        options: Optional[UploadOptions] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._http = transport
        self.options = options or UploadOptions()
        self._sleep = sleep
        self._state = UploadState.IDLE

    @property
    def state(self) -> UploadState:
        return self._state

    def _enter(self, state: UploadState) -> None:
        _logger.debug(f"State {self._state.value} -> {state.value}")
        self._state = state

    # =========================================================================
    # Entry point
    # =========================================================================

    async def upload(self, request: UploadRequest) -> UploadOutcome:
        """Run every phase and return the terminal outcome.

        Never raises UploadError; failures are reported in the outcome.
        """
        self._state = UploadState.IDLE
        session: Optional[UploadSession] = None
        phase = UploadPhase.START
        creation_id: Optional[str] = None

        _logger.info(
            f"Upload begin | account={request.account_id} | bytes={request.total_bytes} "
            f"| chunk_size={self.options.chunk_size}"
        )

        try:
            session = await self.start_session(request)

            phase = UploadPhase.CHUNK
            await self.transfer(session, request)

            phase = UploadPhase.FINISH
            finish = await self.finish(session, request)
            creation_id = finish.creation_id

            phase = UploadPhase.POLL
            await self.wait_until_ready(session, request, finish)

            phase = UploadPhase.PUBLISH
            publish_response = await self.publish(request, creation_id)

        except UploadError as e:
            self._enter(UploadState.FAILED)
            _logger.error(f"Upload failed | {e}")
            return UploadOutcome(
                success=False,
                phase=e.phase,
                creation_id=creation_id,
                error=e,
                session_id=session.session_id if session else None,
                bytes_sent=session.offset if session else 0,
                resyncs=session.resyncs if session else 0,
            )

        self._enter(UploadState.DONE)
        media_id = str(publish_response.get("id"))
        _logger.info(f"Upload done | media_id={media_id} | creation_id={creation_id}")
        return UploadOutcome(
            success=True,
            phase=phase,
            creation_id=creation_id,
            media_id=media_id,
            publish_response=publish_response,
            session_id=session.session_id,
            bytes_sent=session.offset,
            resyncs=session.resyncs,
        )

    # =========================================================================
    # Phases
    # =========================================================================

    async def start_session(self, request: UploadRequest) -> UploadSession:
        """Open a resumable session and return it at offset 0."""
        self._enter(UploadState.SESSION_STARTING)
        if request.total_bytes <= 0:
            raise UploadError(UploadPhase.START, "Video is empty")

        response = await self._call(
            UploadPhase.START,
            "POST",
            f"{self.options.video_base_url}/{request.account_id}/media",
            data={
                "upload_phase": "start",
                "upload_type": "resumable",
                "file_size": request.total_bytes,
                "media_type": "REELS",
                "access_token": request.access_token,
            },
        )
        parsed = parse_start_response(response)
        if isinstance(parsed, Failure):
            raise self._failure_to_error(UploadPhase.START, parsed)

        start = parsed.value
        session = UploadSession(
            session_id=start.upload_session_id,
            upload_url=start.upload_url,
            total=request.total_bytes,
            entity_name=request.entity_name or f"reel_{start.upload_session_id}",
            media_spec=request.media_spec(),
            is_ai_generated=request.is_ai_generated,
        )
        _logger.info(f"Session started | upload_session_id={session.session_id}")
        self._enter(UploadState.TRANSFERRING)
        return session

    async def transfer(self, session: UploadSession, request: UploadRequest) -> None:
        """Send chunks until the session offset reaches the total."""
        chunk_size = self.options.chunk_size
        attempt = 1

        while not session.complete:
            chunk = chunk_at(session.offset, session.total, chunk_size)
            response, network_error = await self._send_chunk(session, request, chunk, attempt)

            if response is not None and response.ok:
                session.acknowledge(chunk)
                attempt = 1
                _logger.debug(
                    f"Chunk {chunk.index} acked | {chunk.content_range} | offset={session.offset}"
                )
                continue

            if response is not None:
                failure = classify_chunk_failure(
                    response.status_code, response.json(), response.text, session.offset, session.total
                )
            else:
                failure = classify_chunk_failure(None, None, network_error or "", session.offset, session.total)

            if failure.kind is ChunkFailureKind.DESYNC:
                if session.resyncs >= self.options.max_resyncs:
                    raise UploadError(
                        UploadPhase.CHUNK,
                        f"Offset did not converge after {session.resyncs} resyncs: {failure.message}",
                        status_code=failure.status_code,
                        error_code=failure.error_code,
                    )
                _logger.warning(
                    f"Offset desync | local={session.offset} | server={failure.server_offset} | resuming"
                )
                session.resync(failure.server_offset, chunk_size)
                attempt = 1
                await self._sleep(self.options.resync_delay)
                continue

            if failure.kind is ChunkFailureKind.RETRYABLE and attempt < self.options.max_chunk_attempts:
                delay = self.options.retry_base_delay * attempt
                _logger.warning(
                    f"Chunk {chunk.index} attempt {attempt}/{self.options.max_chunk_attempts} failed "
                    f"({failure.message}); retrying in {delay:.1f}s"
                )
                attempt += 1
                await self._sleep(delay)
                continue

            raise UploadError(
                UploadPhase.CHUNK,
                f"Chunk {chunk.index} ({chunk.content_range}) failed after {attempt} attempt(s): "
                f"{failure.message}",
                status_code=failure.status_code,
                error_code=failure.error_code,
                retryable=failure.kind is ChunkFailureKind.RETRYABLE,
                details={"offset": session.offset},
            )

        _logger.info(f"Transfer complete | bytes={session.offset} | resyncs={session.resyncs}")

    async def finish(self, session: UploadSession, request: UploadRequest) -> FinishResponse:
        """Close the session and create the media container."""
        self._enter(UploadState.FINISHING)
        data: dict[str, Any] = {
            "upload_phase": "finish",
            "upload_session_id": session.session_id,
            "media_type": "REELS",
            "video_type": "REELS",
            "clips_subtype": "REELS",
            "caption": request.caption,
            "thumb_offset": max(0, int(request.thumb_offset_ms)),
            "is_ai_generated": request.is_ai_generated,
            "share_to_feed": request.share_to_feed,
            "access_token": request.access_token,
        }
        if request.cover_url:
            data["cover_url"] = request.cover_url

        response = await self._call(
            UploadPhase.FINISH,
            "POST",
            f"{self.options.video_base_url}/{request.account_id}/media",
            data=data,
        )
        parsed = parse_finish_response(response)
        if isinstance(parsed, Failure):
            raise self._failure_to_error(UploadPhase.FINISH, parsed)

        finish = parsed.value
        _logger.info(f"Finish accepted | creation_id={finish.creation_id} | status={finish.status_code}")
        return finish

    async def wait_until_ready(
        self,
        session: UploadSession,
        request: UploadRequest,
        finish: FinishResponse,
    ) -> str:
        """Poll the container status until it is ready to publish.

        Skipped when the finish response already reported success.

        Returns:
            The final success status code.
        """
        status = (finish.status_code or "").upper()
        if status in CONTAINER_SUCCESS_STATUSES:
            return status
        if status and status not in CONTAINER_PENDING_STATUSES:
            raise UploadError(UploadPhase.FINISH, f"Container rejected with status {status}")

        self._enter(UploadState.POLLING)
        url = f"{self.options.video_base_url}/{session.session_id}"

        for attempt in range(1, self.options.max_poll_attempts + 1):
            await self._sleep(self.options.poll_interval)
            response = await self._call(
                UploadPhase.POLL,
                "GET",
                url,
                params={"fields": "status_code,status", "access_token": request.access_token},
            )
            parsed = parse_status_response(response)
            if isinstance(parsed, Failure):
                raise self._failure_to_error(UploadPhase.POLL, parsed)

            status = (parsed.value.status_code or "").upper()
            _logger.debug(f"Poll {attempt}/{self.options.max_poll_attempts} | status={status or 'n/a'}")

            if status in CONTAINER_SUCCESS_STATUSES:
                return status
            if status and status not in CONTAINER_PENDING_STATUSES:
                detail = parsed.value.error_message or "no detail"
                raise UploadError(UploadPhase.POLL, f"Processing failed with status {status}: {detail}")

        raise UploadError(
            UploadPhase.POLL,
            f"Container not ready after {self.options.max_poll_attempts} status checks",
            retryable=True,
        )

    async def publish(self, request: UploadRequest, creation_id: str) -> dict[str, Any]:
        """Publish a ready container and return the publish response."""
        self._enter(UploadState.PUBLISHING)
        response = await self._call(
            UploadPhase.PUBLISH,
            "POST",
            f"{self.options.graph_base_url}/{request.account_id}/media_publish",
            data={"creation_id": creation_id, "access_token": request.access_token},
        )
        parsed = parse_publish_response(response)
        if isinstance(parsed, Failure):
            raise self._failure_to_error(UploadPhase.PUBLISH, parsed)
        return parsed.value

    # =========================================================================
    # Helpers
    # =========================================================================

    def build_chunk_headers(
        self,
        session: UploadSession,
        request: UploadRequest,
        chunk: ChunkRange,
        attempt: int = 1,
    ) -> dict[str, str]:
        """Headers for one chunk write."""
        rupload_params = {
            "media_type": "2",
            "upload_id": session.session_id,
            "upload_media_spec": json.dumps(session.media_spec),
            "retry_context": json.dumps({
                "num_step_auto_retry": attempt - 1,
                "num_reupload": session.resyncs,
                "num_step_manual_retry": 0,
            }),
            "xsharing_user_ids": "[]",
            "is_ai_generated": "1" if session.is_ai_generated else "0",
            "chunk_sequence_number": chunk.index,
            "is_last": chunk.is_last,
        }
        return {
            "Authorization": f"OAuth {request.access_token}",
            "offset": str(chunk.start),
            "Content-Length": str(chunk.length),
            "Content-Range": chunk.content_range,
            "Content-Type": "application/octet-stream",
            "X-Entity-Name": session.entity_name,
            "X-Entity-Type": request.mime_type,
            "X-Entity-Length": str(session.total),
            "X-Instagram-Rupload-Params": json.dumps(rupload_params),
        }

    async def _send_chunk(
        self,
        session: UploadSession,
        request: UploadRequest,
        chunk: ChunkRange,
        attempt: int,
    ) -> tuple[Optional[HttpResponse], Optional[str]]:
        headers = self.build_chunk_headers(session, request, chunk, attempt)
        try:
            response = await self._http.request(
                "POST",
                session.upload_url,
                headers=headers,
                content=request.video[chunk.start:chunk.end],
                timeout=TIMEOUT_HTTP_UPLOAD,
            )
        except HttpTransportError as e:
            return None, str(e)
        return response, None

    async def _call(self, phase: UploadPhase, method: str, url: str, **kwargs: Any) -> HttpResponse:
        try:
            return await self._http.request(method, url, **kwargs)
        except HttpTransportError as e:
            raise UploadError(phase, f"Network error: {e}", retryable=True) from e

    @staticmethod
    def _failure_to_error(phase: UploadPhase, failure: Failure) -> UploadError:
        details = failure.details or {}
        return UploadError(
            phase,
            failure.error,
            status_code=details.get("status_code"),
            error_code=details.get("error_code"),
            retryable=bool(details.get("retryable")),
            details=details,
        )
