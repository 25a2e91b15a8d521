"""Abstract cloud file store.

The store is a folder hierarchy of items addressed by opaque ids. Concept
folders, config records and videos all live in it; nothing else in the
package talks to Google Drive directly.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

FOLDER_MIME = "application/vnd.google-apps.folder"
JSON_MIME = "application/json"


class StoreError(Exception):
    """Store operation failed (missing item, API error)."""

    def __init__(self, message: str, item_id: Optional[str] = None):
        super().__init__(message)
        self.item_id = item_id


@dataclass
class StoreItem:
    """Metadata of one file or folder."""

    id: str
    name: str
    mime_type: str
    parents: list[str] = field(default_factory=list)
    created_time: Optional[str] = None
    properties: dict[str, str] = field(default_factory=dict)
    thumbnail_link: Optional[str] = None
    web_content_link: Optional[str] = None
    video_metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")


class FileStore(ABC):
    """Async interface over a hierarchical file store."""

    @abstractmethod
    async def list_children(
        self,
        folder_id: str,
        *,
        folders_only: bool = False,
        mime_prefix: Optional[str] = None,
    ) -> list[StoreItem]:
        """List non-trashed children of a folder."""
        ...

    @abstractmethod
    async def find_child(self, parent_id: str, name: str) -> Optional[StoreItem]:
        """First child of `parent_id` called `name`, or None."""
        ...

    @abstractmethod
    async def find_folder(self, name: str, parent_id: Optional[str] = None) -> Optional[StoreItem]:
        """Folder by name, under `parent_id` or anywhere when None."""
        ...

    @abstractmethod
    async def get(self, item_id: str) -> StoreItem:
        """Item metadata. Raises StoreError when missing."""
        ...

    @abstractmethod
    async def download(self, item_id: str) -> bytes:
        """Full content of a file."""
        ...

    @abstractmethod
    async def update_content(self, item_id: str, content: bytes, mime_type: str) -> None:
        """Replace the content of an existing file."""
        ...

    @abstractmethod
    async def create_folder(self, name: str, parent_id: Optional[str] = None) -> StoreItem:
        ...

    @abstractmethod
    async def create_file(
        self,
        name: str,
        parent_id: str,
        content: bytes,
        mime_type: str,
        properties: Optional[dict[str, str]] = None,
    ) -> StoreItem:
        ...

    @abstractmethod
    async def move(self, item_id: str, new_parent_id: str) -> StoreItem:
        """Re-parent an item (removing all previous parents)."""
        ...

    @abstractmethod
    async def delete(self, item_id: str) -> None:
        ...

    async def read_json(self, item_id: str) -> Any:
        raw = await self.download(item_id)
        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError as e:
            raise StoreError(f"Item {item_id} is not valid JSON: {e}", item_id) from e

    async def write_json(self, item_id: str, data: Any) -> None:
        content = json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")
        await self.update_content(item_id, content, JSON_MIME)
