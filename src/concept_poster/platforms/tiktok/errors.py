"""TikTok API errors."""

from __future__ import annotations

from typing import Optional


class TikTokAPIError(Exception):
    """TikTok API error."""

    def __init__(self, message: str, error_code: Optional[str] = None, log_id: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code
        self.log_id = log_id
