"""Shared test fixtures and configuration.

Provides a seeded in-memory store laid out like the production Drive
folder tree, and an httpx.MockTransport recorder for wire-level tests.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio

from concept_poster.concepts import ConceptRepository
from concept_poster.http import HttpxTransport
from concept_poster.storage import JSON_MIME, InMemoryFileStore, StoreItem

INSTAGRAM_ACCOUNT_ID = "17841400000000001"

CONCEPT_CONFIG: dict[str, Any] = {
    "name": "Cats",
    "postingTimes": ["21:00", "09:00"],
    "schedule": "0 9 * * *",
    "platforms": {"YouTube": True, "TikTok": True, "Instagram": True},
    "apiKeys": {
        "youtube_refresh_token": "yt-refresh",
        "youtube_channel_name": "Cat Channel",
        "tiktok": {
            "access_token": "tt-access",
            "refresh_token": "tt-refresh",
            "expires_in": 86400,
            "open_id": "open-1",
            "display_name": "cats",
        },
        "instagram": INSTAGRAM_ACCOUNT_ID,
    },
    "postDetails": {
        "title": "Daily cat",
        "description": "A cat doing cat things.",
        "hashtags": "#cat #daily",
        "aiLabel": False,
    },
}

INSTAGRAM_ACCOUNTS = [
    {"id": INSTAGRAM_ACCOUNT_ID, "page_access_token": "ig-page-token", "username": "cats"},
]


@dataclass
class SeededConcept:
    """Handles to everything created in the seeded store."""

    store: InMemoryFileStore
    repository: ConceptRepository
    root: StoreItem
    concept: StoreItem
    queue: StoreItem
    posted: StoreItem
    queued_videos: list[StoreItem] = field(default_factory=list)
    posted_videos: list[StoreItem] = field(default_factory=list)


def _json_bytes(data: Any) -> bytes:
    return json.dumps(data).encode("utf-8")


async def seed(config: Optional[dict[str, Any]]) -> SeededConcept:
    store = InMemoryFileStore()
    root = await store.create_folder("v-stock")
    await store.create_file("instagram_accounts.json", root.id, _json_bytes(INSTAGRAM_ACCOUNTS), JSON_MIME)

    concept = await store.create_folder("cats", root.id)
    if config is not None:
        await store.create_file("config.json", concept.id, _json_bytes(config), JSON_MIME)
    queue = await store.create_folder("queue", concept.id)
    posted = await store.create_folder("posted", concept.id)

    first = await store.create_file("first.mp4", queue.id, b"first-video-bytes", "video/mp4")
    second = await store.create_file(
        "second.mp4",
        queue.id,
        b"second-video-bytes",
        "video/mp4",
        properties={"postDetailsOverride": json.dumps({"title": "Second cat"})},
    )
    old = await store.create_file("old.mp4", posted.id, b"old-video-bytes", "video/mp4")

    return SeededConcept(
        store=store,
        repository=ConceptRepository(store, "v-stock"),
        root=root,
        concept=concept,
        queue=queue,
        posted=posted,
        queued_videos=[first, second],
        posted_videos=[old],
    )


@pytest.fixture
def concept_config() -> dict[str, Any]:
    """A fresh copy of the default config.json contents."""
    return json.loads(json.dumps(CONCEPT_CONFIG))


@pytest_asyncio.fixture
async def seeded_concept(concept_config: dict[str, Any]) -> SeededConcept:
    """In-memory store with one concept, two queued videos and one posted.

    Layout:
        v-stock/instagram_accounts.json
        v-stock/cats/config.json
        v-stock/cats/queue/{first.mp4, second.mp4}
        v-stock/cats/posted/old.mp4
    """
    return await seed(concept_config)


@pytest.fixture
def seed_store() -> Callable[[Optional[dict[str, Any]]], Awaitable[SeededConcept]]:
    """Async factory for stores with a custom (or missing) config.json.

    Usage:
        seeded = await seed_store(None)
        seeded = asyncio.run(seed_store(config))  # from sync tests
    """
    return seed


# =============================================================================
# HTTP
# =============================================================================

class RecordingHandler:
    """MockTransport handler that records every request it answers."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def form(self, index: int) -> dict[str, str]:
        """Decoded form body of the n-th request."""
        parsed = parse_qs(self.requests[index].content.decode("utf-8"), keep_blank_values=True)
        return {key: values[0] for key, values in parsed.items()}

    def json_body(self, index: int) -> Any:
        return json.loads(self.requests[index].content.decode("utf-8"))


@pytest.fixture
def mock_http() -> Callable[[Callable[[httpx.Request], httpx.Response]], tuple[HttpxTransport, RecordingHandler]]:
    """Build an HttpxTransport answering through a recording responder.

    Usage:
        def test_x(mock_http):
            http, handler = mock_http(lambda request: httpx.Response(200, json={}))
    """
    def _factory(responder):
        handler = RecordingHandler(responder)
        return HttpxTransport(transport=httpx.MockTransport(handler)), handler

    return _factory


@pytest.fixture
def no_sleep() -> Callable:
    """Async sleep replacement that records requested delays in `.calls`."""
    calls: list[float] = []

    async def _sleep(seconds: float) -> None:
        calls.append(seconds)

    _sleep.calls = calls
    return _sleep
