"""Publish queued concept videos to YouTube, TikTok and Instagram."""

__version__ = "0.1.0"
