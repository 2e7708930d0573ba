"""
Storage backend factory.
Provides configuration-driven backend selection.
"""

from functools import lru_cache

from treasure.config import get_settings
from treasure.storage.base import StorageBackend
from treasure.storage.local import LocalStorageBackend

settings = get_settings()


@lru_cache
def get_storage_backend() -> StorageBackend:
    """
    Get the configured storage backend for storyline assets.

    Raises:
        ValueError: If unknown storage backend is configured
    """
    backend = settings.STORAGE_BACKEND.lower()

    if backend == "local":
        return LocalStorageBackend()
    raise ValueError(f"Unknown storage backend: {backend}")


@lru_cache
def get_image_storage_backend() -> StorageBackend:
    """Get the storage backend holding uploaded treasure images."""
    return LocalStorageBackend(base_path=settings.IMAGES_DIR, url_prefix="/images")


def get_storage() -> StorageBackend:
    """Dependency function for FastAPI."""
    return get_storage_backend()


def get_image_storage() -> StorageBackend:
    """Dependency function for FastAPI."""
    return get_image_storage_backend()
