"""Posting orchestrator.

One run posts one video of one concept:

    1. Load config.json and normalize posting times
    2. Resolve the video (explicit id in queue, then posted; else pick from queue)
    3. Layer metadata: concept defaults < per-video override < caller override
    4. Publish to each selected platform that has credentials, sequentially
    5. Move the video from queue to posted if any platform succeeded
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Mapping, Optional

from ..concepts import (
    ConceptConfig,
    ConceptRepository,
    InstagramAccount,
    VideoFile,
    with_normalized_posting_times,
)
from ..config import Settings
from ..constants import Platform, SelectionPolicy, VideoOrigin
from ..platforms import PlatformPublisher, PlatformRegistry, PostRequest, PostResult, PublisherDeps
from ..storage import StoreError
from .errors import ConceptNotFoundError, FolderNotFoundError, VideoNotFoundError
from .metadata import finalize_post_details, resolve_post_details
from .selection import select_video

_logger = logging.getLogger("posting")

# Fixed fan-out order
PLATFORM_ORDER = (Platform.YOUTUBE, Platform.TIKTOK, Platform.INSTAGRAM)

# (platform, concept_id, concept, instagram accounts) -> publisher
PublisherFactory = Callable[[Platform, str, ConceptConfig, list[InstagramAccount]], PlatformPublisher]


@dataclass
class PostingReport:
    """What a posting run did."""

    concept_id: str
    concept_name: str = ""
    results: dict[str, PostResult] = field(default_factory=dict)
    video: Optional[VideoFile] = None
    origin: Optional[VideoOrigin] = None
    moved: bool = False
    skipped: list[str] = field(default_factory=list)
    move_error: Optional[str] = None

    @property
    def any_success(self) -> bool:
        return any(r.success for r in self.results.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "concept_id": self.concept_id,
            "video": self.video.name if self.video else None,
            "origin": self.origin.value if self.origin else None,
            "moved": self.moved,
            "skipped": list(self.skipped),
            "results": {name: r.to_dict() for name, r in self.results.items()},
        }


class RegistryPublisherFactory:
    """Builds publishers through PlatformRegistry.

    TikTok token refreshes are written back to the concept record.
    """

    def __init__(self, settings: Settings, deps: PublisherDeps, repository: ConceptRepository):
        self._settings = settings
        self._deps = deps
        self._repository = repository

    def __call__(
        self,
        platform: Platform,
        concept_id: str,
        concept: ConceptConfig,
        accounts: list[InstagramAccount],
    ) -> PlatformPublisher:
        config = PlatformRegistry.load_config(platform, concept, self._settings, accounts=accounts)
        deps = self._deps
        if platform is Platform.TIKTOK:
            async def persist(tokens):
                await self._repository.update_tiktok_tokens(concept_id, tokens)

            deps = replace(deps, on_tiktok_tokens_refreshed=persist)
        return PlatformRegistry.get_publisher(platform, config, deps)


class PostingOrchestrator:
    """Runs one posting attempt for a concept.

    Usage:
        orchestrator = PostingOrchestrator(repository, factory)
        report = await orchestrator.run("concept-folder-id")
    """

    def __init__(
        self,
        repository: ConceptRepository,
        publisher_factory: PublisherFactory,
        selection_policy: SelectionPolicy = SelectionPolicy.OLDEST,
        rng: Optional[random.Random] = None,
    ):
        self._repository = repository
        self._publisher_factory = publisher_factory
        self._selection_policy = selection_policy
        self._rng = rng

    async def _load_config(self, concept_id: str) -> ConceptConfig:
        config = await self._repository.load_config(concept_id)
        if config is None:
            raise ConceptNotFoundError(f"config.json not found for concept {concept_id}", concept_id)
        return with_normalized_posting_times(config)

    async def _resolve_video(
        self,
        concept_id: str,
        video_id: Optional[str],
    ) -> tuple[Optional[VideoFile], Optional[VideoOrigin], str, str]:
        queue, posted = await self._repository.find_video_folders(concept_id)
        if queue is None or posted is None:
            missing = " and ".join(n for n, f in (("queue", queue), ("posted", posted)) if f is None)
            raise FolderNotFoundError(f"Concept {concept_id} has no {missing} folder", concept_id)

        if video_id:
            video = await self._repository.find_video(queue.id, video_id)
            if video is not None:
                return video, VideoOrigin.QUEUE, queue.id, posted.id
            video = await self._repository.find_video(posted.id, video_id)
            if video is not None:
                return video, VideoOrigin.POSTED, queue.id, posted.id
            raise VideoNotFoundError(
                f"Video {video_id} not found in queue or posted folder of concept {concept_id}",
                concept_id,
            )

        videos = await self._repository.list_videos(queue.id)
        video = select_video(videos, self._selection_policy, self._rng)
        return video, (VideoOrigin.QUEUE if video else None), queue.id, posted.id

    @staticmethod
    def _selected_platforms(
        config: ConceptConfig,
        platforms: Optional[Iterable[Platform]],
    ) -> list[Platform]:
        wanted = set(platforms) if platforms is not None else set(config.enabled_platforms())
        return [p for p in PLATFORM_ORDER if p in wanted]

    async def run(
        self,
        concept_id: str,
        video_id: Optional[str] = None,
        platforms: Optional[Iterable[Platform]] = None,
        post_details_override: Optional[Mapping[str, Any]] = None,
    ) -> PostingReport:
        """Post one video.

        Args:
            concept_id: Concept folder id.
            video_id: Explicit video to post (looked up in queue, then posted).
            platforms: Platforms to post to; defaults to the concept's enabled map.
            post_details_override: Caller-level title/description/hashtags/aiLabel.

        Returns:
            PostingReport with one entry per attempted platform.

        Raises:
            ConceptNotFoundError: No config.json.
            FolderNotFoundError: Missing queue or posted folder.
            VideoNotFoundError: Explicit video not found.
        """
        _logger.info(f"Posting run started for concept {concept_id}")
        config = await self._load_config(concept_id)
        report = PostingReport(concept_id=concept_id, concept_name=config.name)

        video, origin, queue_id, posted_id = await self._resolve_video(concept_id, video_id)
        if video is None:
            _logger.info(f"No videos in queue for concept {config.name or concept_id}")
            return report

        report.video = video
        report.origin = origin
        _logger.info(f"Selected video {video.name} ({video.id}) from {origin.value}")

        details = finalize_post_details(resolve_post_details(
            config.post_details,
            video.post_details_override,
            post_details_override,
        ))
        _logger.debug(
            f"Effective details | title={details.title!r} | hashtags={details.hashtags!r} "
            f"| aiLabel={details.ai_label}"
        )

        runnable = await self._runnable_platforms(concept_id, config, platforms, report)
        if runnable:
            content = await self._repository.download_video(video.id)
            request = PostRequest(
                video=content,
                file_name=video.name,
                mime_type=video.mime_type or "video/mp4",
                title=details.title,
                description=details.description,
                hashtags=details.hashtags,
                ai_generated=details.ai_label,
                width=video.width,
                height=video.height,
                duration_seconds=video.duration_seconds,
                video_id=video.id,
            )
            for platform, accounts in runnable:
                report.results[platform.value] = await self._publish_one(
                    platform, concept_id, config, accounts, request
                )

        await self._relocate(report, queue_id, posted_id)
        _logger.info(
            f"Posting run finished for concept {concept_id} | "
            + ", ".join(f"{k}={'ok' if v.success else 'failed'}" for k, v in report.results.items())
        )
        return report

    async def _runnable_platforms(
        self,
        concept_id: str,
        config: ConceptConfig,
        platforms: Optional[Iterable[Platform]],
        report: PostingReport,
    ) -> list[tuple[Platform, list[InstagramAccount]]]:
        runnable = []
        for platform in self._selected_platforms(config, platforms):
            if not config.has_credentials(platform):
                _logger.warning(f"Skipping {platform.value}: no connected account for concept {concept_id}")
                report.skipped.append(platform.value)
                continue

            accounts: list[InstagramAccount] = []
            if platform is Platform.INSTAGRAM:
                try:
                    accounts = await self._repository.load_instagram_accounts()
                except StoreError as e:
                    _logger.warning(f"Skipping Instagram: could not load accounts ({e})")
                    report.skipped.append(platform.value)
                    continue
                if not any(a.id == config.api_keys.instagram for a in accounts):
                    _logger.warning(
                        f"Skipping Instagram: account {config.api_keys.instagram} not in instagram_accounts.json"
                    )
                    report.skipped.append(platform.value)
                    continue

            runnable.append((platform, accounts))
        return runnable

    async def _publish_one(
        self,
        platform: Platform,
        concept_id: str,
        config: ConceptConfig,
        accounts: list[InstagramAccount],
        request: PostRequest,
    ) -> PostResult:
        _logger.info(f"Posting to {platform.value}...")
        try:
            publisher = self._publisher_factory(platform, concept_id, config, accounts)
            result = await publisher.publish(request)
        except Exception as e:
            # One platform failing must not stop the others
            _logger.exception(f"{platform.value} adapter raised")
            return PostResult(
                success=False,
                platform=platform.value,
                message=f"Failed to post to {platform.value}",
                error=f"{type(e).__name__}: {e}",
            )

        if result.success:
            _logger.info(f"{platform.value}: {result.message}")
        else:
            _logger.error(f"{platform.value}: {result.message} ({result.error})")
        return result

    async def _relocate(self, report: PostingReport, queue_id: str, posted_id: str) -> None:
        video = report.video
        if report.origin is VideoOrigin.POSTED:
            _logger.info(f"Video {video.name} is already in 'posted'; not moving")
            return
        if not report.any_success:
            _logger.warning(f"No platform succeeded; {video.name} stays in 'queue'")
            return
        try:
            await self._repository.move_video(video.id, posted_id)
        except StoreError as e:
            _logger.error(f"Could not move {video.name} to 'posted': {e}")
            report.move_error = str(e)
            return
        report.moved = True
        _logger.info(f"Video {video.name} moved to 'posted'")
