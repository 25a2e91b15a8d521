"""Tests for the TikTok publisher and token refresh."""

import httpx
import pytest

from concept_poster.concepts import TikTokTokens
from concept_poster.platforms import PostRequest
from concept_poster.platforms.tiktok import (
    TikTokConfig,
    TikTokPublisher,
    needs_refresh,
    plan_tiktok_chunks,
)

MIB = 1024 * 1024
UPLOAD_URL = "https://open-upload.tiktokapis.com/video/?upload_id=abc"


def _config(expires_in: int = 86400, **overrides) -> TikTokConfig:
    values = dict(
        client_key="client-key",
        client_secret="client-secret",
        tokens=TikTokTokens(
            access_token="tt-access",
            refresh_token="tt-refresh",
            expires_in=expires_in,
            open_id="open-1",
            display_name="cats",
        ),
    )
    values.update(overrides)
    return TikTokConfig(**values)


def _request(**overrides) -> PostRequest:
    values = dict(
        video=b"0123456789",
        file_name="first.mp4",
        title="Daily cat",
        description="A cat.",
        hashtags="#cat #daily",
    )
    values.update(overrides)
    return PostRequest(**values)


class TikTokApi:
    """Responder for token, init, upload and status endpoints."""

    def __init__(self, refresh=None, init=None, status="PUBLISH_COMPLETE", fail_reason=None):
        self.refresh = refresh or httpx.Response(200, json={
            "access_token": "new-access",
            "refresh_token": "new-refresh",
            "expires_in": 86400,
            "open_id": "open-1",
        })
        self.init = init or httpx.Response(200, json={
            "data": {"publish_id": "pub-1", "upload_url": UPLOAD_URL},
            "error": {"code": "ok", "message": "", "log_id": "log-1"},
        })
        self.status = status
        self.fail_reason = fail_reason

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/oauth/token/"):
            return self.refresh
        if path.endswith("/video/init/"):
            return self.init
        if request.method == "PUT":
            return httpx.Response(201)
        if path.endswith("/status/fetch/"):
            data = {"status": self.status}
            if self.fail_reason:
                data["fail_reason"] = self.fail_reason
            return httpx.Response(200, json={"data": data, "error": {"code": "ok"}})
        return httpx.Response(404)


class TestChunkPlan:
    """Tests for plan_tiktok_chunks function."""

    def test_small_video_single_chunk(self):
        assert plan_tiktok_chunks(10) == (10, 1)
        assert plan_tiktok_chunks(64 * MIB) == (64 * MIB, 1)

    def test_large_video_folds_remainder(self):
        assert plan_tiktok_chunks(200 * MIB) == (64 * MIB, 3)


class TestTokenRefresh:
    """Refresh only when close to expiry."""

    def test_needs_refresh_threshold(self):
        assert needs_refresh(TikTokTokens(expires_in=3599))
        assert not needs_refresh(TikTokTokens(expires_in=3600))

    @pytest.mark.asyncio
    async def test_fresh_token_is_not_refreshed(self, mock_http):
        http, handler = mock_http(TikTokApi())
        persisted = []

        async def persist(tokens):
            persisted.append(tokens)

        result = await TikTokPublisher(_config(), http, on_tokens_refreshed=persist).publish(_request())

        assert result.success
        assert not any(r.url.path.endswith("/oauth/token/") for r in handler.requests)
        assert persisted == []
        assert handler.requests[0].headers["Authorization"] == "Bearer tt-access"

    @pytest.mark.asyncio
    async def test_expiring_token_is_refreshed_and_persisted(self, mock_http):
        http, handler = mock_http(TikTokApi())
        persisted = []

        async def persist(tokens):
            persisted.append(tokens)

        result = await TikTokPublisher(_config(expires_in=120), http, on_tokens_refreshed=persist).publish(_request())

        assert result.success
        form = handler.form(0)
        assert form["grant_type"] == "refresh_token"
        assert form["refresh_token"] == "tt-refresh"
        assert form["client_key"] == "client-key"
        (tokens,) = persisted
        assert tokens.access_token == "new-access"
        assert tokens.refresh_token == "new-refresh"
        assert tokens.display_name == "cats"
        assert handler.requests[1].headers["Authorization"] == "Bearer new-access"

    @pytest.mark.asyncio
    async def test_unchanged_refresh_is_not_persisted(self, mock_http):
        same = httpx.Response(200, json={"access_token": "tt-access", "refresh_token": "tt-refresh", "expires_in": 120})
        http, _ = mock_http(TikTokApi(refresh=same))
        persisted = []

        async def persist(tokens):
            persisted.append(tokens)

        result = await TikTokPublisher(_config(expires_in=120), http, on_tokens_refreshed=persist).publish(_request())

        assert result.success
        assert persisted == []

    @pytest.mark.asyncio
    async def test_refresh_rejected(self, mock_http):
        rejected = httpx.Response(400, json={"error": "invalid_grant", "error_description": "Refresh token is invalid"})
        http, handler = mock_http(TikTokApi(refresh=rejected))

        result = await TikTokPublisher(_config(expires_in=0), http).publish(_request())

        assert not result.success
        assert "Refresh token is invalid" in result.error
        assert len(handler.requests) == 1


class TestPublish:
    """init -> upload -> status flow."""

    @pytest.mark.asyncio
    async def test_happy_path(self, mock_http):
        http, handler = mock_http(TikTokApi())

        result = await TikTokPublisher(_config(), http).publish(_request(ai_generated=True))

        assert result.success
        assert result.media_id == "pub-1"
        assert [r.method for r in handler.requests] == ["POST", "PUT", "POST"]

        init = handler.json_body(0)
        assert init["post_info"]["title"] == "Daily cat"
        assert init["post_info"]["description"] == "A cat.\n\n#cat #daily"
        assert init["post_info"]["privacy_level"] == "SELF_ONLY"
        assert init["post_info"]["ai_generated_content"] is True
        assert init["source_info"] == {
            "source": "FILE_UPLOAD",
            "video_size": 10,
            "chunk_size": 10,
            "total_chunk_count": 1,
        }

        upload = handler.requests[1]
        assert str(upload.url) == UPLOAD_URL
        assert upload.headers["Content-Range"] == "bytes 0-9/10"
        assert upload.content == b"0123456789"

        assert handler.json_body(2) == {"publish_id": "pub-1"}

    @pytest.mark.asyncio
    async def test_failed_status(self, mock_http):
        http, _ = mock_http(TikTokApi(status="FAILED", fail_reason="file_format_check_failed"))

        result = await TikTokPublisher(_config(), http).publish(_request())

        assert not result.success
        assert result.error == "file_format_check_failed"

    @pytest.mark.asyncio
    async def test_init_error_code(self, mock_http):
        init = httpx.Response(403, json={
            "error": {"code": "spam_risk_too_many_posts", "message": "Too many posts", "log_id": "log-9"},
        })
        http, handler = mock_http(TikTokApi(init=init))

        result = await TikTokPublisher(_config(), http).publish(_request())

        assert not result.success
        assert result.error == "Too many posts"
        assert result.details["error_code"] == "spam_risk_too_many_posts"
        assert result.details["log_id"] == "log-9"
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_incomplete_credentials(self, mock_http):
        http, handler = mock_http(TikTokApi())

        result = await TikTokPublisher(_config(client_key=""), http).publish(_request())

        assert not result.success
        assert "TIKTOK_CLIENT_KEY" in result.error
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_empty_video(self, mock_http):
        http, handler = mock_http(TikTokApi())

        result = await TikTokPublisher(_config(), http).publish(_request(video=b""))

        assert not result.success
        assert handler.requests == []
