"""Instagram caption assembly and cleanup."""

from __future__ import annotations

import unicodedata

from ...constants import INSTAGRAM_CAPTION_MAX_LENGTH

_REPLACEMENTS = {
    "\u00a0": " ",   # Non-breaking space
    "\u200b": "",    # Zero-width space
    "\ufeff": "",    # BOM
    "\u00ad": "",    # Soft hyphen
    "\u2028": "\n",  # Line separator
    "\u2029": "\n",  # Paragraph separator
}


def build_caption(title: str, description: str, hashtags: str) -> str:
    """Title, description and hashtags on separate lines."""
    return f"{title}\n{description}\n{hashtags}"


def sanitize_caption(caption: str, max_length: int = INSTAGRAM_CAPTION_MAX_LENGTH) -> str:
    """Make a caption safe for the Graph API.

    NFC-normalizes, drops control characters other than newline and tab,
    trims surrounding whitespace and cuts to `max_length` characters.
    Emoji are kept.
    """
    if not caption:
        return ""

    caption = unicodedata.normalize("NFC", caption)
    for old, new in _REPLACEMENTS.items():
        caption = caption.replace(old, new)
    caption = caption.replace("\r\n", "\n").replace("\r", "\n")

    cleaned = "".join(
        ch for ch in caption
        if ch in "\n\t" or unicodedata.category(ch) != "Cc"
    ).strip()

    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length].rstrip()
    return cleaned
