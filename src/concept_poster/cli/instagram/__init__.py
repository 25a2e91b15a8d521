"""Instagram feature - direct uploads and replays."""

from .commands import instagram_upload, replay
from .params import InstagramUploadParams
from .service import InstagramUploadService

__all__ = [
    "instagram_upload",
    "replay",
    "InstagramUploadParams",
    "InstagramUploadService",
]
