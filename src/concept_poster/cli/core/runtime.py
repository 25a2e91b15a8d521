"""Wiring of settings into stores, repositories and publisher dependencies."""

from __future__ import annotations

from typing import Optional

from ...concepts import ConceptRepository
from ...config import Settings
from ...http import HttpTransport
from ...platforms import PublisherDeps
from ...storage import FileStore, GoogleDriveStore, StoreError
from ...upload import ReplayRecorder, UploadOptions


def build_store(settings: Settings) -> FileStore:
    """Drive store from GOOGLE_SERVICE_ACCOUNT_JSON.

    Raises:
        StoreError: The variable is missing or unusable.
    """
    if not settings.google_service_account_json:
        raise StoreError("GOOGLE_SERVICE_ACCOUNT_JSON is not set")
    try:
        return GoogleDriveStore.from_service_account_json(settings.google_service_account_json)
    except (ValueError, OSError) as e:
        raise StoreError(f"Invalid GOOGLE_SERVICE_ACCOUNT_JSON: {e}") from e


def build_repository(settings: Settings, store: Optional[FileStore] = None) -> ConceptRepository:
    return ConceptRepository(store or build_store(settings), settings.root_folder_name)


def build_publisher_deps(settings: Settings, transport: HttpTransport) -> PublisherDeps:
    return PublisherDeps(
        transport=transport,
        upload_options=UploadOptions.from_settings(settings),
        recorder=ReplayRecorder.from_setting(settings.instagram_replay_dir),
    )
