"""Instagram CLI commands - direct engine runs outside the posting flow."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from ...core import Failure
from ...upload import ReplayArtifact, find_latest_replay
from ..core.console import console, print_error
from .display import show_outcome, show_replay_config, show_upload_config
from .params import InstagramUploadParams
from .service import InstagramUploadService


def instagram_upload(
    access_token: Optional[str] = typer.Option(None, "--access-token", envvar="IG_ACCESS_TOKEN", help="Page access token"),
    user_id: Optional[str] = typer.Option(None, "--user-id", envvar="IG_USER_ID", help="Instagram business account id"),
    video: Optional[Path] = typer.Option(None, "--video", envvar="IG_VIDEO_PATH", help="Local video file"),
    caption: Optional[str] = typer.Option(None, "--caption", envvar="IG_CAPTION", help="Caption text"),
    caption_file: Optional[Path] = typer.Option(None, "--caption-file", envvar="IG_CAPTION_FILE", help="Read caption from file"),
    ai: bool = typer.Option(False, "--ai/--no-ai", envvar="IG_IS_AI", help="Label as AI generated"),
    cover_url: Optional[str] = typer.Option(None, "--cover-url", envvar="IG_COVER_URL", help="Cover image URL"),
    thumb_offset: Optional[float] = typer.Option(None, "--thumb-offset", envvar="IG_THUMB_OFFSET", help="Cover frame offset in seconds"),
    width: Optional[int] = typer.Option(None, "--width", envvar="IG_VIDEO_WIDTH", help="Video width in pixels"),
    height: Optional[int] = typer.Option(None, "--height", envvar="IG_VIDEO_HEIGHT", help="Video height in pixels"),
    duration: Optional[float] = typer.Option(None, "--duration", envvar="IG_VIDEO_DURATION", help="Duration in seconds"),
    share_to_feed: bool = typer.Option(True, "--share-to-feed/--no-share-to-feed", envvar="IG_SHARE_TO_FEED", help="Also show the reel in the feed"),
) -> None:
    """Upload a local video file as a Reel through the resumable upload engine."""
    parsed = InstagramUploadParams.from_cli(
        access_token=access_token,
        account_id=user_id,
        video_path=video,
        caption=caption,
        caption_file=caption_file,
        is_ai_generated=ai,
        cover_url=cover_url,
        thumb_offset_seconds=thumb_offset,
        width=width,
        height=height,
        duration_seconds=duration,
        share_to_feed=share_to_feed,
    )
    if isinstance(parsed, Failure):
        print_error(parsed.error, parsed.details)
        raise typer.Exit(1)

    params = parsed.value
    show_upload_config(console, params)

    result = asyncio.run(InstagramUploadService().upload(params))
    if isinstance(result, Failure):
        print_error(result.error, result.details)
        raise typer.Exit(1)

    show_outcome(console, result.value)
    if not result.value.success:
        raise typer.Exit(1)


def replay(
    path: Optional[Path] = typer.Argument(None, help="Replay JSON (default: latest in logs/instagram)"),
    access_token: Optional[str] = typer.Option(None, "--access-token", envvar="IG_ACCESS_TOKEN", help="Page access token"),
    video: Optional[Path] = typer.Option(None, "--video", help="Use a local file instead of downloading"),
) -> None:
    """Replay a recorded Instagram upload attempt."""
    replay_path = path.expanduser().resolve() if path else find_latest_replay()
    if replay_path is None or not replay_path.is_file():
        print_error(
            "Replay JSON file not found. Pass the path as an argument "
            "or ensure logs/instagram contains a replay.",
        )
        raise typer.Exit(1)

    try:
        artifact = ReplayArtifact.load(replay_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f"Could not read replay file: {e}")
        raise typer.Exit(1)
    show_replay_config(console, replay_path, artifact)

    result = asyncio.run(InstagramUploadService().replay(replay_path, access_token=access_token, video_path=video))
    if isinstance(result, Failure):
        print_error(result.error, result.details)
        raise typer.Exit(1)

    show_outcome(console, result.value)
    if not result.value.success:
        raise typer.Exit(1)
