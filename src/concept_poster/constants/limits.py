"""Limit constants for concept-poster.

This module contains all limits and protocol numbers:
- Resumable upload chunking
- Retry, resync and polling budgets
- Platform content limits
- Token refresh thresholds

MODIFICATION GUIDE:
------------------
- UPLOAD_* values: defaults for the chunked upload engine; every one of them
  can be overridden through Settings (see concept_poster.config)
- INSTAGRAM_* / TIKTOK_* limits: check the platform documentation first
"""

from typing import Final

# =============================================================================
# RESUMABLE UPLOAD
# =============================================================================

UPLOAD_CHUNK_SIZE: Final[int] = 4 * 1024 * 1024
"""Fixed chunk size for resumable uploads (4 MiB)."""

UPLOAD_MAX_CHUNK_ATTEMPTS: Final[int] = 5
"""Attempts per chunk before a retryable failure becomes fatal."""

UPLOAD_RETRY_BASE_DELAY_SECONDS: Final[float] = 2.0
"""Base delay for chunk retries; the wait is base * attempt number."""

UPLOAD_RESYNC_DELAY_SECONDS: Final[float] = 1.0
"""Delay applied before resuming at a server-reported offset."""

UPLOAD_MAX_RESYNCS: Final[int] = 10
"""Offset resynchronisations tolerated in one transfer."""

UPLOAD_POLL_INTERVAL_SECONDS: Final[float] = 5.0
"""Interval between container status checks."""

UPLOAD_MAX_POLL_ATTEMPTS: Final[int] = 60
"""Status checks before polling gives up (about five minutes)."""

UPLOAD_DEFAULT_WIDTH: Final[int] = 1080
"""Assumed video width when the caller does not know it (9:16)."""

UPLOAD_DEFAULT_HEIGHT: Final[int] = 1920
"""Assumed video height when the caller does not know it (9:16)."""


# =============================================================================
# INSTAGRAM LIMITS
# =============================================================================

INSTAGRAM_CAPTION_MAX_LENGTH: Final[int] = 2200
"""Maximum caption length in characters for Instagram posts."""

GRAPH_API_VERSION: Final[str] = "v19.0"
"""Default Graph API version."""


# =============================================================================
# TIKTOK LIMITS
# =============================================================================

TIKTOK_MAX_VIDEO_SIZE: Final[int] = 4 * 1024 * 1024 * 1024
"""TikTok maximum video size (4 GB)."""

TIKTOK_MAX_CHUNK_SIZE: Final[int] = 64 * 1024 * 1024
"""TikTok maximum chunk size (64 MiB)."""

TIKTOK_CHUNK_THRESHOLD: Final[int] = 64 * 1024 * 1024
"""Videos above this size are sent in several PUTs."""

TIKTOK_REFRESH_THRESHOLD_SECONDS: Final[int] = 3600
"""Refresh the TikTok access token when fewer seconds than this remain."""


# =============================================================================
# TIMEOUTS
# =============================================================================

TIMEOUT_HTTP_DEFAULT: Final[float] = 60.0
"""Default timeout for API calls in seconds."""

TIMEOUT_HTTP_UPLOAD: Final[float] = 300.0
"""Timeout for a single chunk or content PUT in seconds."""
