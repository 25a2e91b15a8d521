"""Post metadata layering and the AI disclosure label."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..concepts import PostDetails

AI_LABEL_MESSAGE = "This video includes altered or synthetic content."


def apply_ai_label(description: str, ai_label: bool) -> str:
    """Append the AI disclosure once.

    Idempotent: a description that already contains the message is
    returned unchanged.
    """
    if not ai_label:
        return description
    if AI_LABEL_MESSAGE in description:
        return description
    return f"{description.strip()}\n\n{AI_LABEL_MESSAGE}"


def resolve_post_details(
    defaults: PostDetails,
    video_override: Optional[Mapping[str, Any]] = None,
    caller_override: Optional[Mapping[str, Any]] = None,
) -> PostDetails:
    """Merge concept defaults < per-video override < caller override.

    Overrides use the stored JSON names (title, description, hashtags,
    aiLabel). Keys set to None in an override are ignored.
    """
    merged = defaults.to_json_dict()
    for layer in (video_override, caller_override):
        if layer:
            merged.update({k: v for k, v in layer.items() if v is not None})
    return PostDetails.model_validate(merged)


def finalize_post_details(details: PostDetails) -> PostDetails:
    """Effective details with the AI label applied to the description."""
    return details.model_copy(update={
        "description": apply_ai_label(details.description, details.ai_label),
    })
