"""Service behind the post command."""

from __future__ import annotations

from typing import Optional

from ...config import Settings, get_settings
from ...core import Failure, Result, Success
from ...http import HttpTransport, HttpxTransport
from ...posting import PostingError, PostingOrchestrator, PostingReport, RegistryPublisherFactory
from ...storage import FileStore, StoreError
from ..core.runtime import build_publisher_deps, build_repository
from .params import PostParams


class PostService:
    """Runs the orchestrator for one concept.

    Store and transport can be injected; by default they are built from
    settings (Drive service account, httpx client).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[FileStore] = None,
        transport: Optional[HttpTransport] = None,
    ):
        self._settings = settings or get_settings()
        self._store = store
        self._transport = transport

    async def run(self, params: PostParams) -> Result[PostingReport]:
        try:
            repository = build_repository(self._settings, self._store)
        except StoreError as e:
            return Failure(str(e))

        transport = self._transport or HttpxTransport()
        try:
            deps = build_publisher_deps(self._settings, transport)
            orchestrator = PostingOrchestrator(
                repository,
                RegistryPublisherFactory(self._settings, deps, repository),
                selection_policy=self._settings.video_selection_policy,
            )
            report = await orchestrator.run(
                params.concept_id,
                video_id=params.video_id,
                platforms=params.platforms,
                post_details_override=params.override or None,
            )
        except PostingError as e:
            return Failure(str(e), {"concept_id": e.concept_id})
        except StoreError as e:
            return Failure(f"Store error: {e}", {"item_id": e.item_id} if e.item_id else None)
        finally:
            if self._transport is None:
                await transport.aclose()

        return Success(report)
