"""Concept records, schedule helpers and the store-backed repository."""

from .models import ApiKeys, ConceptConfig, InstagramAccount, PostDetails, TikTokTokens, VideoFile
from .repository import ConceptRepository, video_from_item
from .schedule import (
    DEFAULT_TIME,
    cron_from_time,
    ensure_posting_times,
    normalize_posting_times,
    normalize_time_string,
    times_from_schedule,
    with_normalized_posting_times,
)

__all__ = [
    "ApiKeys",
    "ConceptConfig",
    "ConceptRepository",
    "DEFAULT_TIME",
    "InstagramAccount",
    "PostDetails",
    "TikTokTokens",
    "VideoFile",
    "cron_from_time",
    "ensure_posting_times",
    "normalize_posting_times",
    "normalize_time_string",
    "times_from_schedule",
    "video_from_item",
    "with_normalized_posting_times",
]
