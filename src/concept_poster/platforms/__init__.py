"""Multi-platform publishing abstraction layer.

Usage:
    from concept_poster.platforms import PlatformRegistry, PublisherDeps

    config = PlatformRegistry.load_config(Platform.YOUTUBE, concept, settings)
    publisher = PlatformRegistry.get_publisher(Platform.YOUTUBE, config, PublisherDeps(transport=http))
    result = await publisher.publish(request)
"""

from .base import (
    PlatformConfig,
    PlatformPublisher,
    PostRequest,
    PostResult,
    ProgressCallback,
)
from .registry import PlatformRegistry, PublisherDeps

__all__ = [
    "PlatformConfig",
    "PlatformPublisher",
    "PlatformRegistry",
    "PostRequest",
    "PostResult",
    "ProgressCallback",
    "PublisherDeps",
]
