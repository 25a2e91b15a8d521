"""Instagram Reels adapter (resumable chunked upload)."""

from .caption import build_caption, sanitize_caption
from .config import InstagramConfig
from .publisher import InstagramPublisher

__all__ = ["InstagramConfig", "InstagramPublisher", "build_caption", "sanitize_caption"]
