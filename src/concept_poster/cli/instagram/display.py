"""Display functions for the Instagram commands."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.table import Table

from ...upload import ReplayArtifact, UploadOutcome
from .params import InstagramUploadParams


def _preview(caption: str, limit: int = 60) -> str:
    if not caption:
        return "(empty)"
    return caption[:limit] + ("..." if len(caption) > limit else "")


def show_upload_config(console: Console, params: InstagramUploadParams) -> None:
    size = params.video_path.stat().st_size
    lines = [
        f"User ID: [cyan]{params.account_id}[/cyan]",
        f"Video: [green]{params.video_path}[/green] ({size} bytes)",
        f"Caption: [dim]{_preview(params.caption)}[/dim]",
        f"AI generated: [yellow]{params.is_ai_generated}[/yellow]",
        f"Share to feed: [yellow]{params.share_to_feed}[/yellow]",
    ]
    if params.cover_url:
        lines.append(f"Cover URL: {params.cover_url}")
    if params.thumb_offset_ms:
        lines.append(f"Thumb offset: {params.thumb_offset_ms} ms")
    if params.width or params.height:
        lines.append(f"Dimensions: {params.width or '?'} x {params.height or '?'}")
    if params.duration_seconds:
        lines.append(f"Duration: {params.duration_seconds}s")
    console.print(Panel("\n".join(lines), title="Instagram Upload"))


def show_replay_config(console: Console, path: Path, artifact: ReplayArtifact) -> None:
    meta = artifact.metadata
    console.print(Panel(
        f"Replay file: [green]{path}[/green]\n"
        f"Recorded: [dim]{artifact.recorded_at or '?'}[/dim]\n"
        f"Instagram account: [cyan]{meta.instagram_account_id}[/cyan]\n"
        f"Video ID: {meta.video_id or '-'}\n"
        f"Video size: {meta.video_bytes} bytes\n"
        f"Caption: [dim]{_preview(meta.caption)}[/dim]",
        title="Instagram Replay",
    ))


def show_outcome(console: Console, outcome: UploadOutcome) -> None:
    table = Table(title="Upload Outcome")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Status", "[green]PUBLISHED[/green]" if outcome.success else "[red]FAILED[/red]")
    table.add_row("Phase", outcome.phase.value)
    table.add_row("Session ID", outcome.session_id or "-")
    table.add_row("Creation ID", outcome.creation_id or "-")
    table.add_row("Media ID", outcome.media_id or "-")
    table.add_row("Bytes sent", str(outcome.bytes_sent))
    table.add_row("Resyncs", str(outcome.resyncs))
    if outcome.error:
        table.add_row("Error", f"[red]{escape(str(outcome.error))}[/red]")
        table.add_row("Retryable", str(outcome.retryable))
    console.print(table)
