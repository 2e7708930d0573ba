"""
Abstract storage backend interface.
Defines the contract for all storage implementations.
"""

from abc import ABC, abstractmethod
from typing import AsyncGenerator


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    Storyline asset files and uploaded treasure images both go through
    this interface.
    """

    @abstractmethod
    async def upload_bytes(self, data: bytes, path: str, content_type: str) -> str:
        """
        Upload raw bytes to storage.

        Args:
            data: Raw file bytes
            path: Destination path in storage (e.g., "assets/{id}/file.glb")
            content_type: MIME type of the content

        Returns:
            The storage path where the file was saved

        Raises:
            StorageException: If upload fails
        """
        pass

    @abstractmethod
    async def download(self, path: str) -> AsyncGenerator[bytes, None]:
        """
        Stream download a file from storage.

        Yields:
            File content in chunks

        Raises:
            StorageException: If file not found or download fails
        """
        pass

    @abstractmethod
    async def download_bytes(self, path: str) -> bytes:
        """
        Download entire file as bytes.

        Raises:
            StorageException: If file not found or download fails
        """
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete a file from storage.

        Returns:
            True if deleted successfully, False if file didn't exist
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a file exists in storage."""
        pass

    @abstractmethod
    async def get_size(self, path: str) -> int:
        """Get the size of a file in bytes."""
        pass

    @abstractmethod
    async def list_files(self, prefix: str = "") -> list[str]:
        """
        List stored file paths.

        Args:
            prefix: Only paths under this directory are returned

        Returns:
            Sorted storage paths relative to the backend root
        """
        pass

    @abstractmethod
    def get_url(self, path: str) -> str:
        """Get a URL for accessing the file."""
        pass


# MIME type mapping for supported formats
FORMAT_MIME_TYPES = {
    "gltf": "model/gltf+json",
    "glb": "model/gltf-binary",
    "usdz": "model/vnd.usdz+zip",
    "fbx": "application/octet-stream",
    "obj": "model/obj",
    "bundle": "application/octet-stream",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
}


def get_mime_type(format: str) -> str:
    """Get MIME type for a file format or extension."""
    return FORMAT_MIME_TYPES.get(format.lower().lstrip("."), "application/octet-stream")
