"""
Collaborators the storyline resolver loads from.

``LocationCatalog`` answers "which assets carry this storyline label", and
``BulkAssetFetcher`` retrieves all of them in one operation. The database
and storage backed implementations serve assets registered through the
asset API.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from treasure.services.asset_service import AssetService
from treasure.storage.base import StorageBackend, get_mime_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationRef:
    """Where one storyline asset lives."""

    asset_id: str
    name: str
    path: str


@dataclass(frozen=True)
class StoryAsset:
    """
    Loaded asset handle handed out by the resolver.

    Opaque to the resolver itself; the API uses it to describe and stream
    the asset.
    """

    name: str
    format: str
    data: bytes = field(repr=False)
    asset_id: str | None = None
    checksum: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def media_type(self) -> str:
        return get_mime_type(self.format)


class LocationCatalog(ABC):
    """Resolves the asset locations tagged with a storyline."""

    @abstractmethod
    async def resolve_locations(self, tag: str) -> Sequence[LocationRef]:
        """
        Look up every asset location carrying ``tag``.

        Returns:
            The locations, empty when the storyline is unknown
        """
        pass


class BulkAssetFetcher(ABC):
    """Retrieves every asset tagged with a storyline."""

    @abstractmethod
    async def fetch_all(self, tag: str) -> Sequence[tuple[str, StoryAsset]]:
        """
        Load all assets carrying ``tag``.

        Returns:
            Ordered ``(identifier, handle)`` pairs

        Raises:
            Exception: Whatever the underlying I/O layer raises
        """
        pass


class DatabaseLocationCatalog(LocationCatalog):
    """Catalog backed by the registered asset table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def resolve_locations(self, tag: str) -> Sequence[LocationRef]:
        async with self.session_factory() as session:
            assets = await AssetService(session).list_by_tag(tag)

        return [
            LocationRef(asset_id=asset.id, name=asset.name, path=asset.file_path)
            for asset in assets
        ]


class StorageAssetFetcher(BulkAssetFetcher):
    """
    Fetcher that downloads every storyline asset from the storage backend.

    Downloads run concurrently; results keep registration order. If any
    download fails, the others are cancelled before the error propagates.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        storage: StorageBackend,
    ):
        self.session_factory = session_factory
        self.storage = storage

    async def fetch_all(self, tag: str) -> Sequence[tuple[str, StoryAsset]]:
        async with self.session_factory() as session:
            assets = await AssetService(session).list_by_tag(tag)

        logger.info(f"Downloading {len(assets)} assets for storyline '{tag}'")
        tasks = [
            asyncio.ensure_future(self.storage.download_bytes(asset.file_path))
            for asset in assets
        ]
        try:
            payloads = await asyncio.gather(*tasks)
        except BaseException:
            # one failed download cancels the rest
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return [
            (
                asset.name,
                StoryAsset(
                    name=asset.name,
                    format=asset.format.value,
                    data=data,
                    asset_id=asset.id,
                    checksum=asset.checksum,
                ),
            )
            for asset, data in zip(assets, payloads)
        ]
