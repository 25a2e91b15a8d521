"""Global constants package for concept-poster.

PACKAGE STRUCTURE:
-----------------
- limits.py : Chunk sizes, retry/poll budgets, platform limits, timeouts
- status.py : Upload phases/states, container statuses, platform enums
- paths.py  : Store folder layout and local log directories

USAGE EXAMPLES:
--------------
    from concept_poster.constants import UPLOAD_CHUNK_SIZE, Platform
"""

from .limits import (
    GRAPH_API_VERSION,
    INSTAGRAM_CAPTION_MAX_LENGTH,
    TIKTOK_CHUNK_THRESHOLD,
    TIKTOK_MAX_CHUNK_SIZE,
    TIKTOK_MAX_VIDEO_SIZE,
    TIKTOK_REFRESH_THRESHOLD_SECONDS,
    TIMEOUT_HTTP_DEFAULT,
    TIMEOUT_HTTP_UPLOAD,
    UPLOAD_CHUNK_SIZE,
    UPLOAD_DEFAULT_HEIGHT,
    UPLOAD_DEFAULT_WIDTH,
    UPLOAD_MAX_CHUNK_ATTEMPTS,
    UPLOAD_MAX_POLL_ATTEMPTS,
    UPLOAD_MAX_RESYNCS,
    UPLOAD_POLL_INTERVAL_SECONDS,
    UPLOAD_RESYNC_DELAY_SECONDS,
    UPLOAD_RETRY_BASE_DELAY_SECONDS,
)
from .paths import (
    CONFIG_FILENAME,
    INSTAGRAM_ACCOUNTS_FILENAME,
    POSTED_FOLDER_NAME,
    QUEUE_FOLDER_NAME,
    ROOT_FOLDER_NAME,
    get_logs_dir,
    get_project_root,
    get_replay_dir,
)
from .status import (
    CONTAINER_PENDING_STATUSES,
    CONTAINER_SUCCESS_STATUSES,
    TRANSIENT_ERROR_TYPES,
    ChunkFailureKind,
    Platform,
    SelectionPolicy,
    UploadPhase,
    UploadState,
    VideoOrigin,
)

__all__ = [
    # Limits
    "GRAPH_API_VERSION",
    "INSTAGRAM_CAPTION_MAX_LENGTH",
    "TIKTOK_CHUNK_THRESHOLD",
    "TIKTOK_MAX_CHUNK_SIZE",
    "TIKTOK_MAX_VIDEO_SIZE",
    "TIKTOK_REFRESH_THRESHOLD_SECONDS",
    "TIMEOUT_HTTP_DEFAULT",
    "TIMEOUT_HTTP_UPLOAD",
    "UPLOAD_CHUNK_SIZE",
    "UPLOAD_DEFAULT_HEIGHT",
    "UPLOAD_DEFAULT_WIDTH",
    "UPLOAD_MAX_CHUNK_ATTEMPTS",
    "UPLOAD_MAX_POLL_ATTEMPTS",
    "UPLOAD_MAX_RESYNCS",
    "UPLOAD_POLL_INTERVAL_SECONDS",
    "UPLOAD_RESYNC_DELAY_SECONDS",
    "UPLOAD_RETRY_BASE_DELAY_SECONDS",
    # Paths
    "CONFIG_FILENAME",
    "INSTAGRAM_ACCOUNTS_FILENAME",
    "POSTED_FOLDER_NAME",
    "QUEUE_FOLDER_NAME",
    "ROOT_FOLDER_NAME",
    "get_logs_dir",
    "get_project_root",
    "get_replay_dir",
    # Status
    "CONTAINER_PENDING_STATUSES",
    "CONTAINER_SUCCESS_STATUSES",
    "TRANSIENT_ERROR_TYPES",
    "ChunkFailureKind",
    "Platform",
    "SelectionPolicy",
    "UploadPhase",
    "UploadState",
    "VideoOrigin",
]
