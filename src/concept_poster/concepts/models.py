"""Concept data models.

Field names follow the JSON stored in each concept's config.json
(camelCase), exposed as snake_case attributes through pydantic aliases.
Unknown keys are kept so a round trip never drops data written by other
tools.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import Platform


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with the stored JSON field names."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class PostDetails(_Record):
    """Title, description, hashtags and AI label for a post."""

    title: str = ""
    description: str = ""
    hashtags: str = ""
    ai_label: bool = Field(default=False, alias="aiLabel")


class TikTokTokens(_Record):
    """OAuth token pair returned by TikTok."""

    access_token: str = ""
    expires_in: int = 0
    open_id: str = ""
    refresh_expires_in: int = 0
    refresh_token: str = ""
    scope: str = ""
    token_type: str = ""
    display_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None


class ApiKeys(_Record):
    youtube_refresh_token: Optional[str] = None
    youtube_channel_id: Optional[str] = None
    youtube_channel_name: Optional[str] = None
    tiktok: Optional[TikTokTokens] = None
    instagram: Optional[str] = None


class ConceptConfig(_Record):
    """Contents of <concept>/config.json."""

    name: str = ""
    posting_times: list[str] = Field(default_factory=list, alias="postingTimes")
    schedule: Optional[str] = None
    platforms: dict[str, bool] = Field(default_factory=dict)
    api_keys: ApiKeys = Field(default_factory=ApiKeys, alias="apiKeys")
    post_details: PostDetails = Field(default_factory=PostDetails, alias="postDetails")

    def enabled_platforms(self) -> list[Platform]:
        """Platforms switched on in the platform map, in declaration order."""
        enabled = []
        for name, on in self.platforms.items():
            if not on:
                continue
            try:
                enabled.append(Platform.parse(name))
            except ValueError:
                continue
        return enabled

    def has_credentials(self, platform: Platform) -> bool:
        keys = self.api_keys
        if platform is Platform.YOUTUBE:
            return bool(keys.youtube_refresh_token)
        if platform is Platform.TIKTOK:
            return bool(keys.tiktok and keys.tiktok.refresh_token)
        return bool(keys.instagram)


class InstagramAccount(_Record):
    """Entry of the shared instagram_accounts.json."""

    id: str
    page_access_token: str = ""
    username: Optional[str] = None
    name: Optional[str] = None


class VideoFile(_Record):
    """A video stored in a concept's queue or posted folder."""

    id: str
    name: str
    mime_type: str = Field(default="video/mp4", alias="mimeType")
    created_time: Optional[str] = Field(default=None, alias="createdTime")
    thumbnail_link: Optional[str] = Field(default=None, alias="thumbnailLink")
    web_content_link: Optional[str] = Field(default=None, alias="webContentLink")
    width: Optional[int] = None
    height: Optional[int] = None
    duration_ms: Optional[int] = Field(default=None, alias="durationMillis")
    post_details_override: Optional[dict[str, Any]] = Field(default=None, alias="postDetailsOverride")

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.duration_ms is None:
            return None
        return self.duration_ms / 1000
