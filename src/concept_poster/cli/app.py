"""Typer app configuration and logging setup."""

from __future__ import annotations

import logging
import sys
import asyncio

import typer
from dotenv import load_dotenv

from ..constants import get_logs_dir
from ..constants.paths import LOG_PLATFORM_API, LOG_POSTING, LOG_UPLOAD_ENGINE

# Load environment variables from .env file
load_dotenv()

if sys.platform == "win32":
    try:
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    except AttributeError:
        pass

# Create Typer app
app = typer.Typer(
    name="concept-poster",
    help="Post concept videos to YouTube, TikTok and Instagram",
    add_completion=False,
)

# log file -> loggers writing to it
LOG_FILES = {
    LOG_UPLOAD_ENGINE: ("upload_engine", "http_transport"),
    LOG_PLATFORM_API: ("instagram_api", "tiktok_api", "youtube_api", "drive_store"),
    LOG_POSTING: ("posting", "scheduler"),
}

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def register_commands() -> None:
    """Register all commands from feature modules."""
    from .post.commands import post

    app.command(name="post")(post)

    from .schedule.commands import check_schedules

    app.command(name="check-schedules")(check_schedules)

    from .instagram.commands import instagram_upload, replay

    app.command(name="instagram-upload")(instagram_upload)
    app.command(name="replay")(replay)


def _debug_enabled() -> bool:
    """Debug output is hidden on GitHub Actions unless FORCE_LOG is set."""
    from ..config import get_settings

    settings = get_settings()
    return not settings.github_actions or settings.force_log


def setup_logging() -> None:
    """Configure logging for CLI.

    - Full detail of each concern goes to its own file under logs/
    - Nothing is logged to the console; commands print through rich
    - Library chatter (httpx, httpcore, googleapiclient) is kept quiet
    """
    log_dir = get_logs_dir()
    file_level = logging.DEBUG if _debug_enabled() else logging.INFO

    # Remove any default console handlers from root logger
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.WARNING)

    for logger_name in ["httpx", "httpcore", "googleapiclient", "google_auth_httplib2", "urllib3", "asyncio"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.WARNING)
        logger.propagate = False

    for filename, logger_names in LOG_FILES.items():
        file_handler = logging.FileHandler(log_dir / filename, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

        for logger_name in logger_names:
            logger = logging.getLogger(logger_name)
            logger.setLevel(file_level)
            logger.propagate = False
            logger.handlers = []
            logger.addHandler(file_handler)


@app.callback()
def _configure() -> None:
    """Post concept videos to YouTube, TikTok and Instagram."""
    setup_logging()


# Register all commands
register_commands()


def main() -> None:
    """CLI entry point."""
    app()
