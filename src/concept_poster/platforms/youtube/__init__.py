"""YouTube adapter (videos.insert)."""

from .config import YouTubeConfig
from .publisher import YouTubePublisher, YouTubeUploadError, hashtags_to_tags

__all__ = ["YouTubeConfig", "YouTubePublisher", "YouTubeUploadError", "hashtags_to_tags"]
