"""Replay artifacts for Instagram uploads.

After each upload a small JSON file describing the attempt is written to
logs/instagram/replay_<timestamp>.json (or INSTAGRAM_REPLAY_DIR). The
`replay` CLI command reads one back and re-runs the upload, downloading the
video again by id. The access token is never written.

Set INSTAGRAM_REPLAY_DIR=disable to turn recording off.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..constants import get_replay_dir
from .models import UploadOutcome, UploadRequest

_logger = logging.getLogger("upload_engine")

REPLAY_DISABLED = "disable"
REPLAY_PREFIX = "replay_"


@dataclass
class ReplayMetadata:
    """What is needed to re-run an upload, minus the secret."""

    instagram_account_id: str
    caption: str
    video_bytes: int
    video_name: Optional[str] = None
    video_id: Optional[str] = None
    is_ai_generated: bool = False
    cover_url: Optional[str] = None
    thumb_offset_ms: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    duration_seconds: Optional[float] = None
    share_to_feed: bool = True

    @classmethod
    def from_request(cls, request: UploadRequest) -> "ReplayMetadata":
        return cls(
            instagram_account_id=request.account_id,
            caption=request.caption,
            video_bytes=request.total_bytes,
            video_name=request.entity_name or None,
            video_id=request.video_id,
            is_ai_generated=request.is_ai_generated,
            cover_url=request.cover_url,
            thumb_offset_ms=request.thumb_offset_ms,
            width=request.width,
            height=request.height,
            duration_seconds=request.duration_seconds,
            share_to_feed=request.share_to_feed,
        )

    def to_request(self, access_token: str, video: bytes) -> UploadRequest:
        return UploadRequest(
            account_id=self.instagram_account_id,
            access_token=access_token,
            video=video,
            caption=self.caption,
            entity_name=self.video_name or "",
            is_ai_generated=self.is_ai_generated,
            cover_url=self.cover_url,
            thumb_offset_ms=self.thumb_offset_ms,
            width=self.width,
            height=self.height,
            duration_seconds=self.duration_seconds,
            share_to_feed=self.share_to_feed,
            video_id=self.video_id,
        )


@dataclass
class ReplayArtifact:
    metadata: ReplayMetadata
    outcome: dict[str, Any] = field(default_factory=dict)
    recorded_at: str = ""

    @classmethod
    def load(cls, path: Path) -> "ReplayArtifact":
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        meta = dict(raw.get("metadata") or {})
        meta.pop("access_token", None)
        known = set(ReplayMetadata.__dataclass_fields__)
        return cls(
            metadata=ReplayMetadata(**{k: v for k, v in meta.items() if k in known}),
            outcome=raw.get("outcome") or {},
            recorded_at=raw.get("recorded_at", ""),
        )


class ReplayRecorder:
    """Writes one artifact per upload attempt."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = directory or get_replay_dir()

    @classmethod
    def from_setting(cls, value: str) -> Optional["ReplayRecorder"]:
        """Build a recorder from INSTAGRAM_REPLAY_DIR, or None when disabled."""
        value = (value or "").strip()
        if value.lower() == REPLAY_DISABLED:
            return None
        return cls(Path(value) if value else None)

    def record(self, request: UploadRequest, outcome: UploadOutcome) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        path = self.directory / f"{REPLAY_PREFIX}{now.strftime('%Y%m%dT%H%M%S%fZ')}.json"

        payload = {
            "recorded_at": now.isoformat(),
            "metadata": asdict(ReplayMetadata.from_request(request)),
            "outcome": {
                "success": outcome.success,
                "phase": outcome.phase.value,
                "session_id": outcome.session_id,
                "creation_id": outcome.creation_id,
                "media_id": outcome.media_id,
                "bytes_sent": outcome.bytes_sent,
                "resyncs": outcome.resyncs,
                "error": outcome.error.to_dict() if outcome.error else None,
            },
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)

        _logger.info(f"Replay artifact written: {path}")
        return path


def find_latest_replay(directory: Optional[Path] = None) -> Optional[Path]:
    """Most recently modified replay artifact, if any."""
    base = directory or get_replay_dir()
    if not base.exists():
        return None
    candidates = sorted(
        base.glob(f"{REPLAY_PREFIX}*.json"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )
    return candidates[0] if candidates else None
