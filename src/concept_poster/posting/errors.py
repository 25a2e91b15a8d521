"""Errors that abort a whole posting run."""

from __future__ import annotations

from typing import Optional


class PostingError(Exception):
    """A posting run cannot proceed."""

    def __init__(self, message: str, concept_id: Optional[str] = None):
        super().__init__(message)
        self.concept_id = concept_id


class ConceptNotFoundError(PostingError):
    """The concept has no config.json."""


class FolderNotFoundError(PostingError):
    """The concept is missing its queue or posted folder."""


class VideoNotFoundError(PostingError):
    """An explicitly requested video is in neither queue nor posted."""
