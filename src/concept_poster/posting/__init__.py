"""Posting orchestration: one video, one concept, every selected platform."""

from .errors import ConceptNotFoundError, FolderNotFoundError, PostingError, VideoNotFoundError
from .metadata import AI_LABEL_MESSAGE, apply_ai_label, finalize_post_details, resolve_post_details
from .orchestrator import (
    PLATFORM_ORDER,
    PostingOrchestrator,
    PostingReport,
    PublisherFactory,
    RegistryPublisherFactory,
)
from .selection import select_video

__all__ = [
    "AI_LABEL_MESSAGE",
    "ConceptNotFoundError",
    "FolderNotFoundError",
    "PLATFORM_ORDER",
    "PostingError",
    "PostingOrchestrator",
    "PostingReport",
    "PublisherFactory",
    "RegistryPublisherFactory",
    "VideoNotFoundError",
    "apply_ai_label",
    "finalize_post_details",
    "resolve_post_details",
    "select_video",
]
