"""Path-related constants for concept-poster.

The cloud store is organised as:
  <root folder>/instagram_accounts.json
  <root folder>/<concept folder>/config.json
  <root folder>/<concept folder>/queue/<videos>
  <root folder>/<concept folder>/posted/<videos>

Local files (logs, replay artifacts) live under the project root.
"""

from pathlib import Path
from typing import Final

# =============================================================================
# STORE LAYOUT
# =============================================================================

ROOT_FOLDER_NAME: Final[str] = "v-stock"
"""Default name of the folder holding every concept."""

CONFIG_FILENAME: Final[str] = "config.json"
"""Concept configuration record."""

QUEUE_FOLDER_NAME: Final[str] = "queue"
"""Folder holding videos waiting to be posted."""

POSTED_FOLDER_NAME: Final[str] = "posted"
"""Folder holding videos already posted."""

INSTAGRAM_ACCOUNTS_FILENAME: Final[str] = "instagram_accounts.json"
"""Shared list of connected Instagram accounts."""


# =============================================================================
# LOCAL DIRECTORIES
# =============================================================================

LOGS_DIR_NAME: Final[str] = "logs"
"""Name of the logs directory."""

REPLAY_SUBDIR_NAME: Final[str] = "instagram"
"""Subdirectory of logs/ where replay artifacts are written."""

LOG_UPLOAD_ENGINE: Final[str] = "upload_engine.log"
LOG_PLATFORM_API: Final[str] = "platform_api.log"
LOG_POSTING: Final[str] = "posting.log"


def get_project_root() -> Path:
    """Get the project root directory.

    Walks up from this file looking for pyproject.toml and falls back to the
    current working directory.
    """
    current = Path(__file__).resolve().parent
    for _ in range(10):
        if (current / "pyproject.toml").exists():
            return current
        parent = current.parent
        if parent == current:
            break
        current = parent
    return Path.cwd()


def get_logs_dir() -> Path:
    """Get (and create) the logs directory."""
    logs_dir = get_project_root() / LOGS_DIR_NAME
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def get_replay_dir() -> Path:
    """Default directory for Instagram replay artifacts."""
    return get_project_root() / LOGS_DIR_NAME / REPLAY_SUBDIR_NAME
