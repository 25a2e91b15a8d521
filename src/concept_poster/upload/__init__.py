"""Resumable chunked video upload.

PACKAGE STRUCTURE:
-----------------
- models.py     : ChunkRange/plan_chunks, UploadRequest, UploadSession, UploadOutcome
- classifier.py : desync / retryable / fatal decision for rejected chunks
- responses.py  : Result-returning parsers for Graph API responses
- engine.py     : ResumableUploadEngine (start -> chunks -> finish -> poll -> publish)
- replay.py     : replay artifacts written after each upload
"""

from .classifier import ChunkFailure, classify_chunk_failure, parse_server_offset
from .engine import ResumableUploadEngine
from .errors import UploadError
from .models import (
    ChunkRange,
    UploadOptions,
    UploadOutcome,
    UploadRequest,
    UploadSession,
    chunk_at,
    plan_chunks,
)
from .replay import ReplayArtifact, ReplayMetadata, ReplayRecorder, find_latest_replay

__all__ = [
    "ChunkFailure",
    "ChunkRange",
    "ReplayArtifact",
    "ReplayMetadata",
    "ReplayRecorder",
    "ResumableUploadEngine",
    "UploadError",
    "UploadOptions",
    "UploadOutcome",
    "UploadRequest",
    "UploadSession",
    "chunk_at",
    "classify_chunk_failure",
    "find_latest_replay",
    "parse_server_offset",
    "plan_chunks",
]
