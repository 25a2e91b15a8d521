"""Wire-level tests for the resumable upload engine.

A FakeGraph responder plays the Graph API: it keeps the bytes it has
accepted, answers an offset mismatch the way the rupload host does, and
can be scripted to fail specific chunk requests.
"""

from __future__ import annotations

import json
from typing import Callable, Optional
from urllib.parse import parse_qs

import httpx
import pytest

from concept_poster.constants import UploadPhase, UploadState
from concept_poster.upload import ResumableUploadEngine, UploadOptions, UploadRequest

UPLOAD_URL = "https://rupload.facebook.com/ig-api-upload/v19.0/sess-1"
VIDEO = b"0123456789"

Fault = Callable[["FakeGraph", httpx.Request], Optional[httpx.Response]]


class FakeGraph:
    """Scripted Graph API for one upload session."""

    def __init__(
        self,
        finish_status: Optional[str] = "IN_PROGRESS",
        statuses: tuple[str, ...] = ("IN_PROGRESS", "FINISHED"),
        chunk_faults: Optional[list[Optional[Fault]]] = None,
        start_response: Optional[httpx.Response] = None,
        publish_response: Optional[httpx.Response] = None,
    ):
        self.received = bytearray()
        self.finish_status = finish_status
        self.statuses = list(statuses)
        self.chunk_faults = list(chunk_faults or [])
        self.start_response = start_response
        self.publish_response = publish_response
        self.requests: list[httpx.Request] = []

    # --- helpers used by tests ---

    def chunk_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url) == UPLOAD_URL]

    def form_requests(self, phase: str) -> list[dict[str, str]]:
        forms = []
        for r in self.requests:
            if r.method != "POST" or str(r.url) == UPLOAD_URL:
                continue
            form = {k: v[0] for k, v in parse_qs(r.content.decode(), keep_blank_values=True).items()}
            if form.get("upload_phase") == phase:
                forms.append(form)
        return forms

    def status_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def publish_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/media_publish")]

    def accept(self, request: httpx.Request) -> None:
        self.received.extend(request.content)

    # --- responder ---

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) == UPLOAD_URL:
            return self._chunk(request)
        if request.method == "GET":
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            return httpx.Response(200, json={"status_code": status, "id": "sess-1"})
        if request.url.path.endswith("/media_publish"):
            return self.publish_response or httpx.Response(200, json={"id": "media-1"})

        form = parse_qs(request.content.decode())
        if form["upload_phase"][0] == "start":
            return self.start_response or httpx.Response(
                200, json={"upload_session_id": "sess-1", "upload_url": UPLOAD_URL}
            )
        body = {"id": "creation-1"}
        if self.finish_status:
            body["status_code"] = self.finish_status
        return httpx.Response(200, json=body)

    def _chunk(self, request: httpx.Request) -> httpx.Response:
        if self.chunk_faults:
            fault = self.chunk_faults.pop(0)
            if fault is not None:
                response = fault(self, request)
                if response is not None:
                    return response

        offset = int(request.headers["offset"])
        if offset != len(self.received):
            return httpx.Response(400, json={
                "debug_info": {
                    "type": "ProcessingFailedError",
                    "message": f"Maximum accepted offset is {len(self.received)}",
                },
            })
        self.accept(request)
        return httpx.Response(200, json={"success": True})


def _status(code: int, payload: dict) -> Fault:
    return lambda graph, request: httpx.Response(code, json=payload)


def _lost_ack(graph: FakeGraph, request: httpx.Request) -> None:
    """Server stores the chunk but the connection drops before the reply."""
    graph.accept(request)
    raise httpx.ConnectError("connection reset", request=request)


def _options(**overrides) -> UploadOptions:
    values = dict(
        chunk_size=4,
        max_chunk_attempts=3,
        retry_base_delay=2.0,
        resync_delay=1.0,
        max_resyncs=3,
        poll_interval=5.0,
        max_poll_attempts=3,
    )
    values.update(overrides)
    return UploadOptions(**values)


def _request(**overrides) -> UploadRequest:
    values = dict(
        account_id="ig-1",
        access_token="secret-token",
        video=VIDEO,
        caption="Daily cat\nA cat.\n#cat",
        entity_name="cat.mp4",
    )
    values.update(overrides)
    return UploadRequest(**values)


def _engine(graph: FakeGraph, sleep, **option_overrides) -> ResumableUploadEngine:
    from concept_poster.http import HttpxTransport

    http = HttpxTransport(transport=httpx.MockTransport(graph))
    return ResumableUploadEngine(http, options=_options(**option_overrides), sleep=sleep)


class TestHappyPath:
    """Full start -> chunks -> finish -> poll -> publish run."""

    @pytest.mark.asyncio
    async def test_publishes_and_reports_ids(self, no_sleep):
        graph = FakeGraph()
        engine = _engine(graph, no_sleep)

        outcome = await engine.upload(_request())

        assert outcome.success
        assert outcome.media_id == "media-1"
        assert outcome.creation_id == "creation-1"
        assert outcome.session_id == "sess-1"
        assert outcome.bytes_sent == len(VIDEO)
        assert bytes(graph.received) == VIDEO
        assert engine.state is UploadState.DONE

    @pytest.mark.asyncio
    async def test_chunks_cover_video_in_order(self, no_sleep):
        graph = FakeGraph()
        await _engine(graph, no_sleep).upload(_request())

        chunks = graph.chunk_requests()
        assert [r.headers["Content-Range"] for r in chunks] == [
            "bytes 0-3/10",
            "bytes 4-7/10",
            "bytes 8-9/10",
        ]
        assert [r.headers["offset"] for r in chunks] == ["0", "4", "8"]
        assert b"".join(r.content for r in chunks) == VIDEO

    @pytest.mark.asyncio
    async def test_chunk_headers(self, no_sleep):
        graph = FakeGraph()
        await _engine(graph, no_sleep).upload(_request(is_ai_generated=True))

        first, _, last = graph.chunk_requests()
        assert first.headers["Authorization"] == "OAuth secret-token"
        assert first.headers["Content-Type"] == "application/octet-stream"
        assert first.headers["X-Entity-Name"] == "cat.mp4"
        assert first.headers["X-Entity-Type"] == "video/mp4"
        assert first.headers["X-Entity-Length"] == "10"

        params = json.loads(first.headers["X-Instagram-Rupload-Params"])
        assert params["media_type"] == "2"
        assert params["upload_id"] == "sess-1"
        assert params["chunk_sequence_number"] == 0
        assert params["is_last"] is False
        assert params["is_ai_generated"] == "1"
        assert json.loads(params["upload_media_spec"]) == {"original_width": 1080, "original_height": 1920}
        assert json.loads(params["retry_context"])["num_step_auto_retry"] == 0

        last_params = json.loads(last.headers["X-Instagram-Rupload-Params"])
        assert last_params["chunk_sequence_number"] == 2
        assert last_params["is_last"] is True

    @pytest.mark.asyncio
    async def test_start_and_finish_fields(self, no_sleep):
        graph = FakeGraph()
        await _engine(graph, no_sleep).upload(_request(thumb_offset_ms=1500, cover_url="https://x/cover.jpg"))

        (start,) = graph.form_requests("start")
        assert start["upload_type"] == "resumable"
        assert start["file_size"] == "10"
        assert start["media_type"] == "REELS"

        (finish,) = graph.form_requests("finish")
        assert finish["upload_session_id"] == "sess-1"
        assert finish["caption"] == "Daily cat\nA cat.\n#cat"
        assert finish["thumb_offset"] == "1500"
        assert finish["cover_url"] == "https://x/cover.jpg"
        assert finish["is_ai_generated"] == "false"
        assert finish["share_to_feed"] == "true"
        assert finish["clips_subtype"] == "REELS"

    @pytest.mark.asyncio
    async def test_hosts(self, no_sleep):
        graph = FakeGraph()
        await _engine(graph, no_sleep).upload(_request())

        start_url = graph.requests[0].url
        assert start_url.host == "graph-video.facebook.com"
        assert start_url.path == "/v19.0/ig-1/media"

        (status,) = graph.status_requests()[:1]
        assert status.url.host == "graph-video.facebook.com"
        assert status.url.path == "/v19.0/sess-1"

        (publish,) = graph.publish_requests()
        assert publish.url.host == "graph.facebook.com"
        assert publish.url.path == "/v19.0/ig-1/media_publish"
        assert parse_qs(publish.content.decode())["creation_id"] == ["creation-1"]


class TestPolling:
    """Container status polling."""

    @pytest.mark.asyncio
    async def test_polls_until_finished(self, no_sleep):
        graph = FakeGraph(statuses=("IN_PROGRESS", "IN_PROGRESS", "FINISHED"))
        outcome = await _engine(graph, no_sleep).upload(_request())

        assert outcome.success
        assert len(graph.status_requests()) == 3
        assert no_sleep.calls == [5.0, 5.0, 5.0]

    @pytest.mark.asyncio
    async def test_finish_status_finished_skips_polling(self, no_sleep):
        graph = FakeGraph(finish_status="FINISHED")
        outcome = await _engine(graph, no_sleep).upload(_request())

        assert outcome.success
        assert graph.status_requests() == []
        assert len(graph.publish_requests()) == 1

    @pytest.mark.asyncio
    async def test_poll_is_bounded(self, no_sleep):
        graph = FakeGraph(statuses=("IN_PROGRESS",))
        outcome = await _engine(graph, no_sleep, max_poll_attempts=3).upload(_request())

        assert not outcome.success
        assert outcome.phase is UploadPhase.POLL
        assert outcome.retryable
        assert outcome.creation_id == "creation-1"
        assert len(graph.status_requests()) == 3
        assert graph.publish_requests() == []

    @pytest.mark.asyncio
    async def test_error_status_fails(self, no_sleep):
        graph = FakeGraph(statuses=("ERROR",))
        outcome = await _engine(graph, no_sleep).upload(_request())

        assert not outcome.success
        assert outcome.phase is UploadPhase.POLL
        assert "ERROR" in str(outcome.error)
        assert graph.publish_requests() == []


class TestChunkRecovery:
    """Desync, retry and fatal chunk failures."""

    @pytest.mark.asyncio
    async def test_lost_ack_resumes_at_server_offset(self, no_sleep):
        graph = FakeGraph(chunk_faults=[_lost_ack])
        outcome = await _engine(graph, no_sleep).upload(_request())

        assert outcome.success
        assert outcome.resyncs == 1
        assert bytes(graph.received) == VIDEO

        offsets = [r.headers["offset"] for r in graph.chunk_requests()]
        # lost ack, retry rejected with the server offset, then the rest
        assert offsets == ["0", "0", "4", "8"]

        # network retry backoff, then the resync pause, then polling
        assert no_sleep.calls[:2] == [2.0, 1.0]

    @pytest.mark.asyncio
    async def test_resync_is_reported_in_retry_context(self, no_sleep):
        graph = FakeGraph(chunk_faults=[_lost_ack])
        await _engine(graph, no_sleep).upload(_request())

        after_resync = graph.chunk_requests()[2]
        context = json.loads(json.loads(after_resync.headers["X-Instagram-Rupload-Params"])["retry_context"])
        assert context["num_reupload"] == 1
        assert context["num_step_auto_retry"] == 0

    @pytest.mark.asyncio
    async def test_server_offset_field_moves_backwards(self, no_sleep):
        def _dropped(graph: FakeGraph, request: httpx.Request) -> httpx.Response:
            # Server lost everything it had
            graph.received.clear()
            return httpx.Response(400, json={"error": {"message": "offset mismatch", "offset": 0}})

        graph = FakeGraph(chunk_faults=[None, _dropped])
        outcome = await _engine(graph, no_sleep).upload(_request())

        assert outcome.success
        assert outcome.resyncs == 1
        assert [r.headers["offset"] for r in graph.chunk_requests()] == ["0", "4", "0", "4", "8"]
        assert bytes(graph.received) == VIDEO

    @pytest.mark.asyncio
    async def test_retryable_then_success(self, no_sleep):
        unavailable = _status(503, {"error": {"message": "Service unavailable"}})
        graph = FakeGraph(chunk_faults=[unavailable, unavailable])
        outcome = await _engine(graph, no_sleep).upload(_request())

        assert outcome.success
        assert outcome.resyncs == 0
        assert no_sleep.calls[:2] == [2.0, 4.0]

        third = graph.chunk_requests()[2]
        context = json.loads(json.loads(third.headers["X-Instagram-Rupload-Params"])["retry_context"])
        assert context["num_step_auto_retry"] == 2

    @pytest.mark.asyncio
    async def test_retry_budget_exhausted(self, no_sleep):
        unavailable = _status(503, {"error": {"message": "Service unavailable"}})
        graph = FakeGraph(chunk_faults=[unavailable] * 5)
        outcome = await _engine(graph, no_sleep, max_chunk_attempts=3).upload(_request())

        assert not outcome.success
        assert outcome.phase is UploadPhase.CHUNK
        assert outcome.retryable
        assert len(graph.chunk_requests()) == 3
        assert graph.form_requests("finish") == []

    @pytest.mark.asyncio
    async def test_fatal_error_stops_immediately(self, no_sleep):
        invalid = _status(400, {"error": {"message": "Invalid parameter", "code": 100}})
        graph = FakeGraph(chunk_faults=[invalid])
        outcome = await _engine(graph, no_sleep).upload(_request())

        assert not outcome.success
        assert outcome.phase is UploadPhase.CHUNK
        assert not outcome.retryable
        assert outcome.error.error_code == 100
        assert len(graph.chunk_requests()) == 1
        assert no_sleep.calls == []

    @pytest.mark.asyncio
    async def test_transient_type_is_retried(self, no_sleep):
        transient = _status(400, {"debug_info": {"type": "TransientError", "message": "try again"}})
        graph = FakeGraph(chunk_faults=[transient])
        outcome = await _engine(graph, no_sleep).upload(_request())

        assert outcome.success
        assert no_sleep.calls[0] == 2.0

    @pytest.mark.asyncio
    async def test_resync_cap(self, no_sleep):
        def _bouncing(graph: FakeGraph, request: httpx.Request) -> httpx.Response:
            local = int(request.headers["offset"])
            return httpx.Response(400, json={"offset": 4 if local == 0 else 0})

        graph = FakeGraph(chunk_faults=[_bouncing] * 10)
        outcome = await _engine(graph, no_sleep, max_resyncs=3).upload(_request())

        assert not outcome.success
        assert outcome.phase is UploadPhase.CHUNK
        assert outcome.resyncs == 3
        assert len(graph.chunk_requests()) == 4

    @pytest.mark.asyncio
    async def test_offsets_never_exceed_total(self, no_sleep):
        graph = FakeGraph(chunk_faults=[_lost_ack, None, _lost_ack])
        outcome = await _engine(graph, no_sleep).upload(_request())

        assert outcome.success
        for request in graph.chunk_requests():
            start = int(request.headers["offset"])
            assert 0 <= start < len(VIDEO)
            assert start + len(request.content) <= len(VIDEO)


class TestPhaseFailures:
    """Failures outside the chunk loop."""

    @pytest.mark.asyncio
    async def test_empty_video_fails_before_any_request(self, no_sleep):
        graph = FakeGraph()
        outcome = await _engine(graph, no_sleep).upload(_request(video=b""))

        assert not outcome.success
        assert outcome.phase is UploadPhase.START
        assert graph.requests == []

    @pytest.mark.asyncio
    async def test_start_rejected(self, no_sleep):
        graph = FakeGraph(start_response=httpx.Response(
            400, json={"error": {"message": "Invalid OAuth access token", "code": 190}}
        ))
        outcome = await _engine(graph, no_sleep).upload(_request())

        assert not outcome.success
        assert outcome.phase is UploadPhase.START
        assert outcome.error.error_code == 190
        assert not outcome.retryable
        assert graph.chunk_requests() == []

    @pytest.mark.asyncio
    async def test_start_missing_upload_url(self, no_sleep):
        graph = FakeGraph(start_response=httpx.Response(200, json={"upload_session_id": "sess-1"}))
        outcome = await _engine(graph, no_sleep).upload(_request())

        assert not outcome.success
        assert outcome.phase is UploadPhase.START

    @pytest.mark.asyncio
    async def test_publish_rejected(self, no_sleep):
        graph = FakeGraph(
            finish_status="FINISHED",
            publish_response=httpx.Response(400, json={"error": {"message": "Media not ready", "code": 9007}}),
        )
        outcome = await _engine(graph, no_sleep).upload(_request())

        assert not outcome.success
        assert outcome.phase is UploadPhase.PUBLISH
        assert outcome.creation_id == "creation-1"
        assert outcome.bytes_sent == len(VIDEO)
        assert "Media not ready" in str(outcome)
