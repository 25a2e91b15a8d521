"""Cloud file store abstraction and implementations."""

from .base import FOLDER_MIME, JSON_MIME, FileStore, StoreError, StoreItem
from .drive import GoogleDriveStore
from .memory import InMemoryFileStore

__all__ = [
    "FOLDER_MIME",
    "JSON_MIME",
    "FileStore",
    "GoogleDriveStore",
    "InMemoryFileStore",
    "StoreError",
    "StoreItem",
]
