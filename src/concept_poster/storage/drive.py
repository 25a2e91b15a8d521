"""Google Drive implementation of FileStore.

Authenticates with a service account whose JSON key is supplied in
GOOGLE_SERVICE_ACCOUNT_JSON (either the JSON itself or a path to it).
All Drive calls are blocking and run in a worker thread.
"""

from __future__ import annotations

import asyncio
import io
import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload, MediaIoBaseUpload

from .base import FOLDER_MIME, FileStore, StoreError, StoreItem

_logger = logging.getLogger("drive_store")

T = TypeVar("T")

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]

ITEM_FIELDS = (
    "id,name,mimeType,parents,createdTime,properties,thumbnailLink,"
    "webContentLink,videoMediaMetadata"
)


def _escape_query_value(s: str) -> str:
    """Escape a value for use in Drive API query strings."""
    return s.replace("\\", "\\\\").replace("'", "\\'")


def load_service_account_info(value: str) -> dict[str, Any]:
    """Parse GOOGLE_SERVICE_ACCOUNT_JSON as inline JSON or a file path."""
    value = (value or "").strip()
    if not value:
        raise StoreError("GOOGLE_SERVICE_ACCOUNT_JSON is not set")
    try:
        if value.startswith("{"):
            return json.loads(value)
        return json.loads(Path(value).expanduser().read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise StoreError(f"Invalid service account credentials: {e}") from e


def _to_item(data: dict[str, Any]) -> StoreItem:
    return StoreItem(
        id=data["id"],
        name=data.get("name", ""),
        mime_type=data.get("mimeType", ""),
        parents=list(data.get("parents") or []),
        created_time=data.get("createdTime"),
        properties=dict(data.get("properties") or {}),
        thumbnail_link=data.get("thumbnailLink"),
        web_content_link=data.get("webContentLink"),
        video_metadata=dict(data.get("videoMediaMetadata") or {}),
    )


class GoogleDriveStore(FileStore):
    """Drive v3 store.

    Usage:
        store = GoogleDriveStore.from_service_account_json(settings.google_service_account_json)
        root = await store.find_folder("v-stock")
    """

    def __init__(self, drive: Any):
        self._drive = drive

    @classmethod
    def from_service_account_json(cls, value: str) -> "GoogleDriveStore":
        info = load_service_account_info(value)
        credentials = service_account.Credentials.from_service_account_info(info, scopes=DRIVE_SCOPES)
        drive = build("drive", "v3", credentials=credentials, cache_discovery=False)
        return cls(drive)

    async def _run(self, fn: Callable[[], T], what: str, item_id: Optional[str] = None) -> T:
        try:
            return await asyncio.to_thread(fn)
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            _logger.error(f"Drive {what} failed: HTTP {status}")
            raise StoreError(f"Drive {what} failed (HTTP {status}): {e}", item_id) from e

    def _query_files(self, q: str, fields: str = ITEM_FIELDS) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        page_token: Optional[str] = None
        while True:
            response = self._drive.files().list(
                q=q,
                fields=f"nextPageToken,files({fields})",
                pageSize=1000,
                pageToken=page_token,
                supportsAllDrives=True,
                includeItemsFromAllDrives=True,
            ).execute()
            items.extend(response.get("files", []))
            page_token = response.get("nextPageToken")
            if not page_token:
                break
        return items

    async def list_children(
        self,
        folder_id: str,
        *,
        folders_only: bool = False,
        mime_prefix: Optional[str] = None,
    ) -> list[StoreItem]:
        q = f"'{_escape_query_value(folder_id)}' in parents and trashed=false"
        if folders_only:
            q += f" and mimeType='{FOLDER_MIME}'"
        elif mime_prefix:
            q += f" and mimeType contains '{_escape_query_value(mime_prefix)}'"
        files = await self._run(lambda: self._query_files(q), "list", folder_id)
        return [_to_item(f) for f in files]

    async def find_child(self, parent_id: str, name: str) -> Optional[StoreItem]:
        q = (
            f"'{_escape_query_value(parent_id)}' in parents and "
            f"name='{_escape_query_value(name)}' and trashed=false"
        )
        files = await self._run(lambda: self._query_files(q), "find", parent_id)
        return _to_item(files[0]) if files else None

    async def find_folder(self, name: str, parent_id: Optional[str] = None) -> Optional[StoreItem]:
        q = f"mimeType='{FOLDER_MIME}' and name='{_escape_query_value(name)}' and trashed=false"
        if parent_id:
            q += f" and '{_escape_query_value(parent_id)}' in parents"
        files = await self._run(lambda: self._query_files(q), "find folder", parent_id)
        return _to_item(files[0]) if files else None

    async def get(self, item_id: str) -> StoreItem:
        data = await self._run(
            lambda: self._drive.files().get(
                fileId=item_id, fields=ITEM_FIELDS, supportsAllDrives=True
            ).execute(),
            "get",
            item_id,
        )
        return _to_item(data)

    async def download(self, item_id: str) -> bytes:
        def _download() -> bytes:
            request = self._drive.files().get_media(fileId=item_id, supportsAllDrives=True)
            buffer = io.BytesIO()
            downloader = MediaIoBaseDownload(buffer, request)
            done = False
            while not done:
                _, done = downloader.next_chunk()
            return buffer.getvalue()

        content = await self._run(_download, "download", item_id)
        _logger.debug(f"Downloaded {item_id} ({len(content)} bytes)")
        return content

    async def update_content(self, item_id: str, content: bytes, mime_type: str) -> None:
        media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mime_type, resumable=False)
        await self._run(
            lambda: self._drive.files().update(
                fileId=item_id, media_body=media, supportsAllDrives=True
            ).execute(),
            "update",
            item_id,
        )

    async def create_folder(self, name: str, parent_id: Optional[str] = None) -> StoreItem:
        body: dict[str, Any] = {"name": name, "mimeType": FOLDER_MIME}
        if parent_id:
            body["parents"] = [parent_id]
        data = await self._run(
            lambda: self._drive.files().create(
                body=body, fields=ITEM_FIELDS, supportsAllDrives=True
            ).execute(),
            "create folder",
            parent_id,
        )
        return _to_item(data)

    async def create_file(
        self,
        name: str,
        parent_id: str,
        content: bytes,
        mime_type: str,
        properties: Optional[dict[str, str]] = None,
    ) -> StoreItem:
        body: dict[str, Any] = {"name": name, "parents": [parent_id]}
        if properties:
            body["properties"] = properties
        media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mime_type, resumable=False)
        data = await self._run(
            lambda: self._drive.files().create(
                body=body, media_body=media, fields=ITEM_FIELDS, supportsAllDrives=True
            ).execute(),
            "create file",
            parent_id,
        )
        return _to_item(data)

    async def move(self, item_id: str, new_parent_id: str) -> StoreItem:
        def _move() -> dict[str, Any]:
            current = self._drive.files().get(
                fileId=item_id, fields="parents", supportsAllDrives=True
            ).execute()
            previous = ",".join(current.get("parents") or [])
            return self._drive.files().update(
                fileId=item_id,
                addParents=new_parent_id,
                removeParents=previous,
                fields=ITEM_FIELDS,
                supportsAllDrives=True,
            ).execute()

        data = await self._run(_move, "move", item_id)
        return _to_item(data)

    async def delete(self, item_id: str) -> None:
        await self._run(
            lambda: self._drive.files().delete(fileId=item_id, supportsAllDrives=True).execute(),
            "delete",
            item_id,
        )
