"""Runtime settings loaded from the environment (and .env)."""

from __future__ import annotations

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    GRAPH_API_VERSION,
    ROOT_FOLDER_NAME,
    UPLOAD_CHUNK_SIZE,
    UPLOAD_MAX_CHUNK_ATTEMPTS,
    UPLOAD_MAX_POLL_ATTEMPTS,
    UPLOAD_POLL_INTERVAL_SECONDS,
    UPLOAD_RETRY_BASE_DELAY_SECONDS,
    SelectionPolicy,
)

# Load .env file
load_dotenv()


class Settings(BaseSettings):
    """Process-wide settings.

    Every field maps to the upper-case environment variable of the same name.
    Credentials default to empty strings so that a missing secret surfaces
    as a skipped platform or a clear CLI error rather than an import failure.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Cloud store
    google_service_account_json: str = ""
    root_folder_name: str = ROOT_FOLDER_NAME

    # OAuth clients
    google_client_id: str = ""
    google_client_secret: str = ""
    tiktok_client_key: str = ""
    tiktok_client_secret: str = ""

    # Upload protocol
    graph_api_version: str = GRAPH_API_VERSION
    upload_chunk_size: int = Field(default=UPLOAD_CHUNK_SIZE, gt=0)
    upload_max_chunk_attempts: int = Field(default=UPLOAD_MAX_CHUNK_ATTEMPTS, ge=1)
    upload_retry_base_delay: float = Field(default=UPLOAD_RETRY_BASE_DELAY_SECONDS, ge=0)
    upload_poll_interval: float = Field(default=UPLOAD_POLL_INTERVAL_SECONDS, ge=0)
    upload_max_poll_attempts: int = Field(default=UPLOAD_MAX_POLL_ATTEMPTS, ge=1)

    # Orchestration
    video_selection_policy: SelectionPolicy = SelectionPolicy.OLDEST
    schedule_utc_offset_hours: float = 9.0

    # "disable" turns replay artifacts off; empty means logs/instagram
    instagram_replay_dir: str = ""

    # CI behaviour
    github_actions: bool = False
    force_log: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()
