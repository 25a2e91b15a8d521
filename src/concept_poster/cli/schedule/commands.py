"""Schedule CLI command - one scheduler pass."""

from __future__ import annotations

import asyncio

import typer

from ...config import get_settings
from ...scheduler import ScheduleChecker
from ...storage import StoreError
from ..core.console import console, print_error
from ..core.runtime import build_repository
from .display import show_schedule_summary


def check_schedules() -> None:
    """Run the posting worker for every concept whose posting time is due.

    Meant to be triggered hourly (cron, GitHub Actions). Exits with status 1
    when the store is unreachable or any worker failed.
    """
    settings = get_settings()
    try:
        repository = build_repository(settings)
        checker = ScheduleChecker(
            repository,
            utc_offset_hours=settings.schedule_utc_offset_hours,
            mask_names=settings.github_actions,
        )
        summary = asyncio.run(checker.run())
    except StoreError as e:
        print_error(str(e))
        raise typer.Exit(1)

    show_schedule_summary(console, summary)
    if not summary.success:
        raise typer.Exit(1)
