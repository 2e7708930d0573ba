"""
Asset service - Business logic for storyline asset operations.
Handles registration, search, tag management and storyline lookups.
"""

import hashlib
from datetime import datetime, timezone
from typing import Sequence
from uuid import uuid4

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from treasure.core.exceptions import AssetNotFoundException
from treasure.models.asset import Asset
from treasure.models.tag import Tag, TagCategory
from treasure.schemas.asset import AssetCreate, AssetSearchParams, AssetUpdate

TECHNICAL_KEYWORDS = ("lowpoly", "lod", "mobile", "ar", "fallback", "optimized")


class AssetService:
    """Service class for asset operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, asset_id: str) -> Asset:
        """
        Get asset by ID.

        Raises:
            AssetNotFoundException: If asset not found
        """
        query = (
            select(Asset)
            .options(selectinload(Asset.tags))
            .where(Asset.id == asset_id)
        )
        result = await self.db.execute(query)
        asset = result.scalar_one_or_none()

        if not asset:
            raise AssetNotFoundException(asset_id)

        return asset

    async def list_by_tag(self, tag_name: str) -> Sequence[Asset]:
        """
        List every asset labelled ``tag_name`` in registration order.

        This is the storyline lookup used by the resolver.
        """
        query = (
            select(Asset)
            .join(Asset.tags)
            .where(Tag.name == tag_name)
            .order_by(Asset.created_at.asc(), Asset.name.asc())
        )
        result = await self.db.execute(query)
        return result.scalars().unique().all()

    async def search(self, params: AssetSearchParams) -> tuple[Sequence[Asset], int]:
        """
        Search and filter assets with pagination.

        Returns:
            Tuple of (list of assets, total count)
        """
        query = select(Asset).options(selectinload(Asset.tags))
        count_query = select(func.count(Asset.id))

        conditions = []

        if params.q:
            search_term = f"%{params.q}%"
            conditions.append(
                or_(
                    Asset.name.ilike(search_term),
                    Asset.description.ilike(search_term),
                )
            )

        if params.tags:
            tag_list = [t.strip() for t in params.tags.split(",") if t.strip()]
            tag_subquery = (
                select(Asset.id)
                .join(Asset.tags)
                .where(Tag.name.in_(tag_list))
                .group_by(Asset.id)
            )
            conditions.append(Asset.id.in_(tag_subquery))

        if params.format:
            conditions.append(Asset.format == params.format)

        if conditions:
            query = query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))

        count_result = await self.db.execute(count_query)
        total = count_result.scalar() or 0

        offset = (params.page - 1) * params.size
        query = query.order_by(Asset.created_at.desc(), Asset.name.asc()).offset(offset).limit(params.size)

        result = await self.db.execute(query)
        assets = result.scalars().all()

        return assets, total

    async def create(
        self,
        data: AssetCreate,
        file_path: str,
        file_size: int,
        checksum: str,
        asset_id: str | None = None,
    ) -> Asset:
        """
        Register a stored asset file.

        Args:
            data: Asset creation data
            file_path: Storage path for the file
            file_size: Size of the file in bytes
            checksum: SHA-256 checksum of the file
            asset_id: Pre-allocated ID (used to build the storage path)

        Returns:
            Created Asset model
        """
        tags = await self._get_or_create_tags(data.tags)

        asset = Asset(
            id=asset_id or str(uuid4()),
            name=data.name,
            description=data.description,
            format=data.format,
            file_path=file_path,
            file_size=file_size,
            checksum=checksum,
            created_at=_utcnow(),
            updated_at=_utcnow(),
            tags=tags,
        )

        self.db.add(asset)

        for tag in tags:
            tag.usage_count += 1

        await self.db.flush()
        await self.db.refresh(asset)

        return asset

    async def update_metadata(self, asset_id: str, data: AssetUpdate) -> Asset:
        """Update name and/or description."""
        asset = await self.get_by_id(asset_id)

        if data.name is not None:
            asset.name = data.name
        if data.description is not None:
            asset.description = data.description

        asset.updated_at = _utcnow()

        await self.db.flush()
        await self.db.refresh(asset)

        return asset

    async def update_tags(self, asset_id: str, tags: list[str]) -> Asset:
        """Replace the asset's tag set."""
        asset = await self.get_by_id(asset_id)

        for tag in asset.tags:
            tag.usage_count = max(0, tag.usage_count - 1)

        new_tags = await self._get_or_create_tags(tags)

        asset.tags = new_tags
        asset.updated_at = _utcnow()

        for tag in new_tags:
            tag.usage_count += 1

        await self.db.flush()
        await self.db.refresh(asset)

        return asset

    async def delete(self, asset_id: str) -> Asset:
        """
        Delete an asset record.

        Returns:
            The deleted asset, so the caller can remove its file
        """
        asset = await self.get_by_id(asset_id)

        for tag in asset.tags:
            tag.usage_count = max(0, tag.usage_count - 1)

        await self.db.delete(asset)
        await self.db.flush()

        return asset

    async def _get_or_create_tags(self, tag_names: list[str]) -> list[Tag]:
        """
        Get existing tags or create new ones.

        A technical tag applied without any storyline tag is the asset's
        storyline label, so it is promoted to the storyline category.
        """
        names = list(dict.fromkeys(tag_names))
        has_storyline = any(not _is_technical_keyword(name) for name in names)

        tags: list[Tag] = []
        for name in names:
            category = self._determine_tag_category(name, has_storyline)

            query = select(Tag).where(Tag.name == name)
            result = await self.db.execute(query)
            tag = result.scalar_one_or_none()

            if not tag:
                tag = Tag(
                    id=str(uuid4()),
                    name=name,
                    category=category,
                    usage_count=0,
                )
                self.db.add(tag)
            elif category is TagCategory.STORYLINE:
                tag.category = TagCategory.STORYLINE

            tags.append(tag)

        return tags

    def _determine_tag_category(self, name: str, has_storyline: bool) -> TagCategory:
        """Keyword tags riding next to a storyline tag are technical."""
        if has_storyline and _is_technical_keyword(name):
            return TagCategory.TECHNICAL
        return TagCategory.STORYLINE


def _is_technical_keyword(name: str) -> bool:
    return name.lower() in TECHNICAL_KEYWORDS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_checksum(data: bytes) -> str:
    """Compute SHA-256 checksum of data."""
    return hashlib.sha256(data).hexdigest()
