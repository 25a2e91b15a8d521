"""Display functions for the schedule command."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.table import Table

from ...scheduler import ScheduleSummary


def show_schedule_summary(console: Console, summary: ScheduleSummary) -> None:
    """Execution summary of one schedule pass."""
    if not summary.jobs:
        console.print(Panel(
            f"Checked {summary.checked} concept(s). "
            "No concepts were scheduled to run in the last hour.",
            title="Schedule Check",
            border_style="dim",
        ))
        return

    table = Table(title="Executed Jobs")
    table.add_column("Concept", style="cyan")
    table.add_column("Time")
    table.add_column("Status")
    for job in summary.jobs:
        if job.success:
            status = "[green]OK[/green]"
        elif job.error:
            status = f"[red]FAILED[/red] {escape(job.error)}"
        else:
            status = f"[red]FAILED[/red] (exit {job.exit_code})"
        table.add_row(job.name, job.time, status)
    console.print(table)

    failed = len(summary.failed_jobs)
    if failed:
        console.print(f"[red]{failed} of {len(summary.jobs)} job(s) failed[/red]")
