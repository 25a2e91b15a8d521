"""Immutable parameters for the post command."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from ...constants import Platform
from ...core import Failure, Result, Success


def parse_platforms(values: Optional[Sequence[str]]) -> Result[Optional[tuple[Platform, ...]]]:
    """Parse repeated --platform values; None/empty means the concept's own map."""
    if not values:
        return Success(None)
    platforms: list[Platform] = []
    for value in values:
        try:
            platform = Platform.parse(value)
        except ValueError:
            return Failure(
                f"Unknown platform: {value}",
                {"valid": ", ".join(p.value for p in Platform)},
            )
        if platform not in platforms:
            platforms.append(platform)
    return Success(tuple(platforms))


@dataclass(frozen=True)
class PostParams:
    """Parameters of one `post` invocation."""

    concept_id: str
    video_id: Optional[str] = None
    platforms: Optional[tuple[Platform, ...]] = None
    override: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_cli(
        cls,
        concept_id: Optional[str],
        video: Optional[str] = None,
        platform: Optional[Sequence[str]] = None,
        title: Optional[str] = None,
        description: Optional[str] = None,
        hashtags: Optional[str] = None,
        ai_label: Optional[bool] = None,
    ) -> Result["PostParams"]:
        """Create from CLI arguments, or a Failure describing the bad input."""
        if not concept_id:
            return Failure("Concept id is required (argument or CONCEPT_ID)")

        parsed = parse_platforms(platform)
        if isinstance(parsed, Failure):
            return parsed

        # Keys use the stored JSON names so they layer over config.json values
        override = {
            key: value
            for key, value in (
                ("title", title),
                ("description", description),
                ("hashtags", hashtags),
                ("aiLabel", ai_label),
            )
            if value is not None
        }
        return Success(cls(
            concept_id=concept_id,
            video_id=video or None,
            platforms=parsed.value,
            override=override,
        ))
