"""In-memory FileStore for tests and dry runs.

Each instance is independent; create a fresh one per test.
"""

from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional

from .base import FOLDER_MIME, FileStore, StoreError, StoreItem

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class InMemoryFileStore(FileStore):
    """Dict-backed store with deterministic ids and creation times."""

    def __init__(self):
        self._items: dict[str, StoreItem] = {}
        self._content: dict[str, bytes] = {}
        self._ids = itertools.count(1)
        self._clock = itertools.count(0)

    def _next_id(self) -> str:
        return f"mem-{next(self._ids)}"

    def _next_created_time(self) -> str:
        # One second apart so creation order is also time order
        return (_EPOCH + timedelta(seconds=next(self._clock))).isoformat().replace("+00:00", "Z")

    def _require(self, item_id: str) -> StoreItem:
        item = self._items.get(item_id)
        if item is None:
            raise StoreError(f"Item not found: {item_id}", item_id)
        return item

    async def list_children(
        self,
        folder_id: str,
        *,
        folders_only: bool = False,
        mime_prefix: Optional[str] = None,
    ) -> list[StoreItem]:
        children = []
        for item in self._items.values():
            if folder_id not in item.parents:
                continue
            if folders_only and not item.is_folder:
                continue
            if mime_prefix and not item.mime_type.startswith(mime_prefix):
                continue
            children.append(item)
        return children

    async def find_child(self, parent_id: str, name: str) -> Optional[StoreItem]:
        for item in await self.list_children(parent_id):
            if item.name == name:
                return item
        return None

    async def find_folder(self, name: str, parent_id: Optional[str] = None) -> Optional[StoreItem]:
        for item in self._items.values():
            if not item.is_folder or item.name != name:
                continue
            if parent_id is None or parent_id in item.parents:
                return item
        return None

    async def get(self, item_id: str) -> StoreItem:
        return self._require(item_id)

    async def download(self, item_id: str) -> bytes:
        item = self._require(item_id)
        if item.is_folder:
            raise StoreError(f"Cannot download a folder: {item_id}", item_id)
        return self._content.get(item_id, b"")

    async def update_content(self, item_id: str, content: bytes, mime_type: str) -> None:
        item = self._require(item_id)
        self._content[item_id] = bytes(content)
        self._items[item_id] = replace(item, mime_type=mime_type)

    async def create_folder(self, name: str, parent_id: Optional[str] = None) -> StoreItem:
        if parent_id is not None:
            self._require(parent_id)
        item = StoreItem(
            id=self._next_id(),
            name=name,
            mime_type=FOLDER_MIME,
            parents=[parent_id] if parent_id else [],
            created_time=self._next_created_time(),
        )
        self._items[item.id] = item
        return item

    async def create_file(
        self,
        name: str,
        parent_id: str,
        content: bytes,
        mime_type: str,
        properties: Optional[dict[str, str]] = None,
        created_time: Optional[str] = None,
    ) -> StoreItem:
        self._require(parent_id)
        item = StoreItem(
            id=self._next_id(),
            name=name,
            mime_type=mime_type,
            parents=[parent_id],
            created_time=created_time or self._next_created_time(),
            properties=dict(properties or {}),
        )
        self._items[item.id] = item
        self._content[item.id] = bytes(content)
        return item

    async def move(self, item_id: str, new_parent_id: str) -> StoreItem:
        item = self._require(item_id)
        self._require(new_parent_id)
        moved = replace(item, parents=[new_parent_id])
        self._items[item_id] = moved
        return moved

    async def delete(self, item_id: str) -> None:
        self._require(item_id)
        for child in await self.list_children(item_id):
            await self.delete(child.id)
        del self._items[item_id]
        self._content.pop(item_id, None)
