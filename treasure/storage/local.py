"""
Local filesystem storage backend.
Stores files on the local filesystem for development and simple deployments.
"""

from pathlib import Path
from typing import AsyncGenerator

import aiofiles
import aiofiles.os

from treasure.config import get_settings
from treasure.core.exceptions import StorageException, ValidationException
from treasure.storage.base import StorageBackend

settings = get_settings()

CHUNK_SIZE = 1024 * 1024


class LocalStorageBackend(StorageBackend):
    """
    Local filesystem storage implementation.

    Files live under ``base_path``; paths that resolve outside it are
    rejected.
    """

    def __init__(self, base_path: str | None = None, url_prefix: str = "/storage"):
        """
        Initialize local storage backend.

        Args:
            base_path: Base directory for storage. Defaults to settings.LOCAL_STORAGE_PATH
            url_prefix: URL prefix the directory is served under
        """
        self.base_path = Path(base_path or settings.LOCAL_STORAGE_PATH).resolve()
        self.url_prefix = url_prefix.rstrip("/")
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, path: str) -> Path:
        """Get full filesystem path for a storage path."""
        full_path = (self.base_path / path).resolve()
        if full_path != self.base_path and self.base_path not in full_path.parents:
            raise ValidationException(
                "Invalid storage path",
                details={"path": path},
            )
        return full_path

    async def upload_bytes(self, data: bytes, path: str, content_type: str) -> str:
        """Upload raw bytes to storage."""
        full_path = self._get_full_path(path)

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)

            async with aiofiles.open(full_path, "wb") as f:
                await f.write(data)

            return path

        except OSError as e:
            raise StorageException(
                message=f"Failed to upload bytes: {str(e)}",
                details={"path": path},
            )

    async def download(self, path: str) -> AsyncGenerator[bytes, None]:
        """Stream download a file in chunks."""
        full_path = self._get_full_path(path)

        if not full_path.is_file():
            raise StorageException(
                message=f"File not found: {path}",
                details={"path": path},
            )

        try:
            async with aiofiles.open(full_path, "rb") as f:
                while chunk := await f.read(CHUNK_SIZE):
                    yield chunk

        except OSError as e:
            raise StorageException(
                message=f"Failed to download file: {str(e)}",
                details={"path": path},
            )

    async def download_bytes(self, path: str) -> bytes:
        """Download entire file as bytes."""
        full_path = self._get_full_path(path)

        if not full_path.is_file():
            raise StorageException(
                message=f"File not found: {path}",
                details={"path": path},
            )

        try:
            async with aiofiles.open(full_path, "rb") as f:
                return await f.read()

        except OSError as e:
            raise StorageException(
                message=f"Failed to download file: {str(e)}",
                details={"path": path},
            )

    async def delete(self, path: str) -> bool:
        """Delete a file and prune directories left empty."""
        full_path = self._get_full_path(path)

        if not full_path.is_file():
            return False

        try:
            await aiofiles.os.remove(full_path)
        except OSError as e:
            raise StorageException(
                message=f"Failed to delete file: {str(e)}",
                details={"path": path},
            )

        parent = full_path.parent
        while parent != self.base_path:
            try:
                parent.rmdir()  # Only removes if empty
                parent = parent.parent
            except OSError:
                break

        return True

    async def exists(self, path: str) -> bool:
        """Check if a file exists."""
        return self._get_full_path(path).is_file()

    async def get_size(self, path: str) -> int:
        """Get file size in bytes."""
        full_path = self._get_full_path(path)

        if not full_path.is_file():
            raise StorageException(
                message=f"File not found: {path}",
                details={"path": path},
            )

        stat = await aiofiles.os.stat(full_path)
        return stat.st_size

    async def list_files(self, prefix: str = "") -> list[str]:
        """List files under a directory, relative to the storage root."""
        root = self._get_full_path(prefix) if prefix else self.base_path
        if not root.is_dir():
            return []

        return sorted(
            p.relative_to(self.base_path).as_posix()
            for p in root.rglob("*")
            if p.is_file()
        )

    def get_url(self, path: str) -> str:
        """Get URL/path for file access."""
        return f"{self.url_prefix}/{path}"
