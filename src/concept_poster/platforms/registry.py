"""Platform registry for discovering and instantiating platform publishers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Type

from ..constants import Platform

if TYPE_CHECKING:
    from ..concepts import ConceptConfig
    from ..config import Settings
    from ..http import HttpTransport
    from ..upload import ReplayRecorder, UploadOptions
    from ..upload.engine import SleepFn
    from .base import PlatformConfig, PlatformPublisher, ProgressCallback
    from .tiktok.tokens import TokenPersistFn
    from .youtube.publisher import ServiceFactory


@dataclass
class PublisherDeps:
    """Collaborators handed to publishers at construction time."""

    transport: "HttpTransport"
    upload_options: Optional["UploadOptions"] = None
    sleep: "SleepFn" = asyncio.sleep
    recorder: Optional["ReplayRecorder"] = None
    on_tiktok_tokens_refreshed: Optional["TokenPersistFn"] = None
    youtube_service_factory: Optional["ServiceFactory"] = None
    progress_callback: "ProgressCallback" = None


PublisherBuilder = Callable[["PlatformConfig", PublisherDeps], "PlatformPublisher"]


class PlatformRegistry:
    """Registry and factory for platform publishers.

    Platforms are registered at import time and retrieved by Platform.

    Usage:
        config = PlatformRegistry.load_config(Platform.TIKTOK, concept, settings)
        publisher = PlatformRegistry.get_publisher(Platform.TIKTOK, config, deps)
    """

    _platforms: dict[Platform, tuple[Type["PlatformConfig"], PublisherBuilder]] = {}

    @classmethod
    def register(
        cls,
        platform: Platform,
        config_cls: Type["PlatformConfig"],
        builder: PublisherBuilder,
    ) -> None:
        """Register a platform adapter.

        Args:
            platform: Platform identifier.
            config_cls: Config class implementing PlatformConfig.
            builder: Creates the publisher from a config and shared deps.
        """
        cls._platforms[platform] = (config_cls, builder)

    @classmethod
    def _lookup(cls, platform: Platform) -> tuple[Type["PlatformConfig"], PublisherBuilder]:
        if platform not in cls._platforms:
            available = ", ".join(p.value for p in cls._platforms)
            raise ValueError(f"Unknown platform: {platform}. Available: {available}")
        return cls._platforms[platform]

    @classmethod
    def load_config(
        cls,
        platform: Platform,
        concept: "ConceptConfig",
        settings: "Settings",
        **context: Any,
    ) -> "PlatformConfig":
        """Build the platform config for a concept."""
        config_cls, _ = cls._lookup(platform)
        return config_cls.from_concept(concept, settings, **context)

    @classmethod
    def get_publisher(
        cls,
        platform: Platform,
        config: "PlatformConfig",
        deps: PublisherDeps,
    ) -> "PlatformPublisher":
        """Get a publisher instance for a platform.

        Raises:
            ValueError: If platform is not registered.
        """
        _, builder = cls._lookup(platform)
        return builder(config, deps)

    @classmethod
    def available_platforms(cls) -> list[Platform]:
        return list(cls._platforms)

    @classmethod
    def is_registered(cls, platform: Platform) -> bool:
        return platform in cls._platforms


def _build_youtube(config: "PlatformConfig", deps: PublisherDeps) -> "PlatformPublisher":
    from .youtube import YouTubePublisher

    kwargs: dict[str, Any] = {"progress_callback": deps.progress_callback}
    if deps.youtube_service_factory is not None:
        kwargs["service_factory"] = deps.youtube_service_factory
    return YouTubePublisher(config, **kwargs)


def _build_tiktok(config: "PlatformConfig", deps: PublisherDeps) -> "PlatformPublisher":
    from .tiktok import TikTokPublisher

    return TikTokPublisher(
        config,
        deps.transport,
        on_tokens_refreshed=deps.on_tiktok_tokens_refreshed,
        progress_callback=deps.progress_callback,
    )


def _build_instagram(config: "PlatformConfig", deps: PublisherDeps) -> "PlatformPublisher":
    from .instagram import InstagramPublisher

    return InstagramPublisher(
        config,
        deps.transport,
        options=deps.upload_options,
        sleep=deps.sleep,
        recorder=deps.recorder,
        progress_callback=deps.progress_callback,
    )


def _register_platforms() -> None:
    """Register all available platform adapters.

    Called automatically on module import.
    """
    from .instagram import InstagramConfig
    from .tiktok import TikTokConfig
    from .youtube import YouTubeConfig

    PlatformRegistry.register(Platform.YOUTUBE, YouTubeConfig, _build_youtube)
    PlatformRegistry.register(Platform.TIKTOK, TikTokConfig, _build_tiktok)
    PlatformRegistry.register(Platform.INSTAGRAM, InstagramConfig, _build_instagram)


_register_platforms()
