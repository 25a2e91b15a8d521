"""Immutable parameters for the Instagram commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ...core import Failure, Result, Success


@dataclass(frozen=True)
class InstagramUploadParams:
    """Parameters of a direct `instagram-upload` run."""

    access_token: str
    account_id: str
    video_path: Path
    caption: str = ""
    is_ai_generated: bool = False
    cover_url: Optional[str] = None
    thumb_offset_ms: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    duration_seconds: Optional[float] = None
    share_to_feed: bool = True

    @classmethod
    def from_cli(
        cls,
        access_token: Optional[str],
        account_id: Optional[str],
        video_path: Optional[Path],
        caption: Optional[str] = None,
        caption_file: Optional[Path] = None,
        is_ai_generated: bool = False,
        cover_url: Optional[str] = None,
        thumb_offset_seconds: Optional[float] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        duration_seconds: Optional[float] = None,
        share_to_feed: bool = True,
    ) -> Result["InstagramUploadParams"]:
        if not access_token:
            return Failure("Access token is required. Provide IG_ACCESS_TOKEN or --access-token.")
        if not account_id:
            return Failure("Instagram user ID is required. Provide IG_USER_ID or --user-id.")
        if not video_path:
            return Failure("Video path is required. Provide IG_VIDEO_PATH or --video.")

        resolved = video_path.expanduser().resolve()
        if not resolved.is_file():
            return Failure(f"Video file not found: {resolved}")

        # --caption wins over --caption-file
        text = caption or ""
        if not text and caption_file:
            try:
                text = caption_file.expanduser().read_text(encoding="utf-8")
            except OSError as e:
                return Failure(f"Could not read caption file: {e}", {"path": str(caption_file)})

        return Success(cls(
            access_token=access_token,
            account_id=account_id,
            video_path=resolved,
            caption=text,
            is_ai_generated=is_ai_generated,
            cover_url=cover_url or None,
            thumb_offset_ms=int(round(thumb_offset_seconds * 1000)) if thumb_offset_seconds else 0,
            width=width,
            height=height,
            duration_seconds=duration_seconds,
            share_to_feed=share_to_feed,
        ))
