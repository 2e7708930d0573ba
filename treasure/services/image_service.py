"""
Treasure image service - uploaded clue photos on disk.
"""

import logging
import os
import re
from pathlib import PurePosixPath
from typing import Any

from treasure.core.exceptions import StorageException, ValidationException
from treasure.storage.base import StorageBackend

logger = logging.getLogger(__name__)

IMAGE_FILE_PATTERN = re.compile(r"\.(jpg|jpeg|png|gif)$", re.IGNORECASE)
DEFAULT_EXTENSION = ".png"


def ensure_plain_filename(file_name: str) -> str:
    """Reject names that are empty or point outside the images directory."""
    if (
        not file_name
        or file_name in (".", "..")
        or "\\" in file_name
        or PurePosixPath(file_name).name != file_name
    ):
        raise ValidationException("Invalid file name", details={"fileName": file_name})
    return file_name


def build_image_filename(image_name: str | None, original_name: str | None) -> str:
    """
    Final name for an uploaded image.

    The requested ``image_name`` (or the uploaded file's own name) keeps the
    original file's extension, ``.png`` when it has none.
    """
    original = original_name or ""
    name = image_name or original
    extension = os.path.splitext(original)[1] or DEFAULT_EXTENSION
    final_name = name if name.endswith(extension) else name + extension
    return ensure_plain_filename(final_name)


class TreasureImageService:
    """Stores, lists and prunes treasure images."""

    def __init__(self, storage: StorageBackend):
        self.storage = storage

    async def save(self, data: bytes, file_name: str, content_type: str) -> str:
        """Write an image, replacing any existing file of the same name."""
        path = await self.storage.upload_bytes(data, ensure_plain_filename(file_name), content_type)
        logger.info(f"Treasure image saved: {path} ({len(data)} bytes)")
        return path

    async def delete(self, file_name: str) -> bool:
        """
        Delete an image.

        Returns:
            False when the file did not exist
        """
        deleted = await self.storage.delete(ensure_plain_filename(file_name))
        if deleted:
            logger.info(f"Image file deleted successfully: {file_name}")
        else:
            logger.info(f"Image file not found, considering it already deleted: {file_name}")
        return deleted

    async def list_images(self) -> list[str]:
        """Image files in the images directory."""
        return [
            path
            for path in await self.storage.list_files()
            if "/" not in path and IMAGE_FILE_PATTERN.search(path)
        ]

    def get_url(self, file_name: str) -> str:
        return self.storage.get_url(file_name)

    async def cleanup(self, expected_files: set[str]) -> dict[str, Any]:
        """
        Delete images not referenced by the web config.

        A failed deletion is reported and does not stop the others.
        """
        image_files = await self.list_images()
        orphaned = [name for name in image_files if name not in expected_files]
        logger.info(f"Orphaned files to delete: {orphaned}")

        results: list[dict[str, Any]] = []
        deleted_count = 0
        for name in orphaned:
            try:
                await self.storage.delete(name)
            except StorageException as e:
                logger.error(f"Failed to delete {name}: {e.message}")
                results.append({"file": name, "deleted": False, "error": e.message})
                continue
            deleted_count += 1
            results.append({"file": name, "deleted": True})

        return {
            "expectedFiles": sorted(expected_files),
            "actualFiles": image_files,
            "orphanedFiles": orphaned,
            "deletionResults": results,
            "deletedCount": deleted_count,
        }
