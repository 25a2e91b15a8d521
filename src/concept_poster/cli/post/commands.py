"""Post CLI command - thin wrapper orchestrating params, display, and service."""

from __future__ import annotations

import asyncio
from typing import List, Optional

import typer

from ..core.console import console, print_error
from ...core import Failure
from .display import show_post_config, show_post_report
from .params import PostParams
from .service import PostService


def post(
    concept_id: Optional[str] = typer.Argument(None, envvar="CONCEPT_ID", help="Concept folder id"),
    video: Optional[str] = typer.Option(None, "--video", "-v", help="Video id to post (default: next in queue)"),
    platform: Optional[List[str]] = typer.Option(
        None, "--platform", "-p", help="Platform to post to (repeatable; default: config.json)"
    ),
    title: Optional[str] = typer.Option(None, "--title", help="Override title"),
    description: Optional[str] = typer.Option(None, "--description", help="Override description"),
    hashtags: Optional[str] = typer.Option(None, "--hashtags", help="Override hashtags"),
    ai_label: Optional[bool] = typer.Option(
        None, "--ai-label/--no-ai-label", help="Override the AI-generated content label"
    ),
) -> None:
    """Post one video of a concept to its platforms.

    Exits with status 1 on a fatal error or when every attempted platform failed.
    """
    parsed = PostParams.from_cli(
        concept_id=concept_id,
        video=video,
        platform=platform,
        title=title,
        description=description,
        hashtags=hashtags,
        ai_label=ai_label,
    )
    if isinstance(parsed, Failure):
        print_error(parsed.error, parsed.details)
        raise typer.Exit(1)

    params = parsed.value
    show_post_config(console, params)

    result = asyncio.run(PostService().run(params))
    if isinstance(result, Failure):
        print_error(result.error, result.details)
        raise typer.Exit(1)

    report = result.value
    show_post_report(console, report)
    if report.results and not report.any_success:
        raise typer.Exit(1)
