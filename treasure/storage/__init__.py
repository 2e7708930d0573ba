"""
Storage abstraction layer for the treasure hunt server.
"""

from treasure.storage.base import StorageBackend, get_mime_type, FORMAT_MIME_TYPES
from treasure.storage.local import LocalStorageBackend
from treasure.storage.factory import (
    get_image_storage,
    get_image_storage_backend,
    get_storage,
    get_storage_backend,
)

__all__ = [
    "StorageBackend",
    "LocalStorageBackend",
    "get_storage_backend",
    "get_storage",
    "get_image_storage_backend",
    "get_image_storage",
    "get_mime_type",
    "FORMAT_MIME_TYPES",
]
