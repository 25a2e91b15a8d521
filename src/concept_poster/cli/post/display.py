"""Display functions for the post command - pure functions for Rich output."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.table import Table

from ...posting import PostingReport
from .params import PostParams


def show_post_config(console: Console, params: PostParams) -> None:
    """Display what is about to be posted."""
    platforms = ", ".join(p.value for p in params.platforms) if params.platforms else "From config.json"
    overrides = ", ".join(sorted(params.override)) or "None"
    console.print(Panel(
        f"Concept: [cyan]{params.concept_id}[/cyan]\n"
        f"Video: [green]{params.video_id or 'Next in queue'}[/green]\n"
        f"Platforms: [yellow]{platforms}[/yellow]\n"
        f"Overrides: [yellow]{overrides}[/yellow]",
        title="Post Video",
    ))


def build_results_table(report: PostingReport) -> Table:
    table = Table(title="Results")
    table.add_column("Platform", style="cyan")
    table.add_column("Status")
    table.add_column("Media ID", style="dim")
    table.add_column("Message")

    for name, result in report.results.items():
        status = "[green]OK[/green]" if result.success else "[red]FAILED[/red]"
        message = result.message if result.success else f"{result.message}: {result.error}"
        table.add_row(name, status, result.media_id or "-", escape(message))
    for name in report.skipped:
        table.add_row(name, "[yellow]SKIPPED[/yellow]", "-", "No connected account")
    return table


def show_post_report(console: Console, report: PostingReport) -> None:
    """Display per-platform results and where the video ended up."""
    if report.video is None:
        console.print(Panel(
            "[yellow]No videos in queue. Nothing to post.[/yellow]",
            border_style="yellow",
        ))
        return

    console.print(f"\nVideo: [bold]{report.video.name}[/bold] [dim]({report.video.id})[/dim]")
    console.print(build_results_table(report))

    if report.moved:
        console.print("[green]Moved to 'posted'[/green]")
    elif report.move_error:
        console.print(f"[red]Could not move to 'posted': {escape(report.move_error)}[/red]")
    elif report.origin is not None and report.origin.value == "posted":
        console.print("[dim]Already in 'posted'; not moved[/dim]")
    elif report.results:
        console.print("[yellow]No platform succeeded; video stays in 'queue'[/yellow]")
