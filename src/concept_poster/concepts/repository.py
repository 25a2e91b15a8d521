"""Concept records on top of a FileStore.

Layout:
    <root>/instagram_accounts.json
    <root>/<concept>/config.json
    <root>/<concept>/queue/
    <root>/<concept>/posted/
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from ..constants import (
    CONFIG_FILENAME,
    INSTAGRAM_ACCOUNTS_FILENAME,
    POSTED_FOLDER_NAME,
    QUEUE_FOLDER_NAME,
    ROOT_FOLDER_NAME,
)
from ..storage import JSON_MIME, FileStore, StoreError, StoreItem
from .models import ConceptConfig, InstagramAccount, TikTokTokens, VideoFile

_logger = logging.getLogger("posting")


def video_from_item(item: StoreItem) -> VideoFile:
    """Build a VideoFile from store metadata.

    A per-video override is read from the `postDetailsOverride` custom
    property (a JSON string). Malformed overrides are ignored with a warning.
    """
    override = None
    raw = item.properties.get("postDetailsOverride")
    if raw:
        try:
            parsed = json.loads(raw)
        except ValueError:
            _logger.warning(f"Ignoring malformed postDetailsOverride on {item.name}")
        else:
            if isinstance(parsed, dict):
                override = parsed

    meta = item.video_metadata
    return VideoFile(
        id=item.id,
        name=item.name,
        mime_type=item.mime_type or "video/mp4",
        created_time=item.created_time,
        thumbnail_link=item.thumbnail_link,
        web_content_link=item.web_content_link,
        width=_int_or_none(meta.get("width")),
        height=_int_or_none(meta.get("height")),
        duration_ms=_int_or_none(meta.get("durationMillis")),
        post_details_override=override,
    )


class ConceptRepository:
    """Reads and writes concept data through a FileStore."""

    def __init__(self, store: FileStore, root_folder_name: str = ROOT_FOLDER_NAME):
        self.store = store
        self.root_folder_name = root_folder_name

    async def find_root(self) -> Optional[StoreItem]:
        return await self.store.find_folder(self.root_folder_name)

    async def list_concepts(self) -> list[StoreItem]:
        """Concept folders under the root folder (empty if there is no root)."""
        root = await self.find_root()
        if root is None:
            _logger.warning(f"Root folder '{self.root_folder_name}' not found")
            return []
        return await self.store.list_children(root.id, folders_only=True)

    async def _config_item(self, concept_id: str) -> Optional[StoreItem]:
        return await self.store.find_child(concept_id, CONFIG_FILENAME)

    async def load_raw_config(self, concept_id: str) -> Optional[dict[str, Any]]:
        item = await self._config_item(concept_id)
        if item is None:
            return None
        data = await self.store.read_json(item.id)
        if not isinstance(data, dict):
            raise StoreError(f"{CONFIG_FILENAME} of {concept_id} is not a JSON object", item.id)
        return data

    async def load_config(self, concept_id: str) -> Optional[ConceptConfig]:
        """Parsed config.json of a concept, or None when it has none."""
        data = await self.load_raw_config(concept_id)
        if data is None:
            return None
        try:
            return ConceptConfig.model_validate(data)
        except ValidationError as e:
            raise StoreError(f"Invalid {CONFIG_FILENAME} for {concept_id}: {e}") from e

    async def save_config(self, concept_id: str, config: ConceptConfig) -> None:
        await self._write_config(concept_id, config.to_json_dict())

    async def _write_config(self, concept_id: str, data: dict[str, Any]) -> None:
        item = await self._config_item(concept_id)
        if item is None:
            content = json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")
            await self.store.create_file(CONFIG_FILENAME, concept_id, content, JSON_MIME)
        else:
            await self.store.write_json(item.id, data)

    async def update_tiktok_tokens(self, concept_id: str, tokens: TikTokTokens) -> None:
        """Read-modify-write of apiKeys.tiktok, leaving every other key alone."""
        data = await self.load_raw_config(concept_id) or {}
        api_keys = data.get("apiKeys")
        if not isinstance(api_keys, dict):
            api_keys = {}
        api_keys["tiktok"] = tokens.to_json_dict()
        data["apiKeys"] = api_keys
        await self._write_config(concept_id, data)
        _logger.info(f"Stored refreshed TikTok tokens for concept {concept_id}")

    async def find_video_folders(self, concept_id: str) -> tuple[Optional[StoreItem], Optional[StoreItem]]:
        """(queue, posted) folders of a concept; either may be None."""
        queue = await self.store.find_folder(QUEUE_FOLDER_NAME, concept_id)
        posted = await self.store.find_folder(POSTED_FOLDER_NAME, concept_id)
        return queue, posted

    async def list_videos(self, folder_id: str) -> list[VideoFile]:
        items = await self.store.list_children(folder_id, mime_prefix="video/")
        return [video_from_item(item) for item in items]

    async def find_video(self, folder_id: str, video_id: str) -> Optional[VideoFile]:
        for video in await self.list_videos(folder_id):
            if video.id == video_id:
                return video
        return None

    async def download_video(self, video_id: str) -> bytes:
        return await self.store.download(video_id)

    async def move_video(self, video_id: str, folder_id: str) -> None:
        await self.store.move(video_id, folder_id)

    async def load_instagram_accounts(self) -> list[InstagramAccount]:
        """Accounts from <root>/instagram_accounts.json (empty when missing)."""
        root = await self.find_root()
        if root is None:
            return []
        item = await self.store.find_child(root.id, INSTAGRAM_ACCOUNTS_FILENAME)
        if item is None:
            _logger.warning(f"{INSTAGRAM_ACCOUNTS_FILENAME} not found in '{self.root_folder_name}'")
            return []
        data = await self.store.read_json(item.id)
        if not isinstance(data, list):
            raise StoreError(f"{INSTAGRAM_ACCOUNTS_FILENAME} must hold a JSON list", item.id)
        accounts = []
        for entry in data:
            if isinstance(entry, dict) and entry.get("id"):
                accounts.append(InstagramAccount.model_validate({**entry, "id": str(entry["id"])}))
        return accounts


def _int_or_none(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None
