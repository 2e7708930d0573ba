"""
Tag service - storyline label queries.
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from treasure.models.tag import Tag, TagCategory


class TagService:
    """Service class for tag operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self, category: TagCategory | None = None) -> Sequence[Tag]:
        """List tags, most used first, optionally within one category."""
        query = select(Tag)
        if category:
            query = query.where(Tag.category == category)
        query = query.order_by(Tag.usage_count.desc(), Tag.name.asc())

        result = await self.db.execute(query)
        return result.scalars().all()

    async def get_popular(self, limit: int = 20) -> Sequence[Tag]:
        """Tags in use, most used first."""
        query = (
            select(Tag)
            .where(Tag.usage_count > 0)
            .order_by(Tag.usage_count.desc(), Tag.name.asc())
            .limit(limit)
        )
        result = await self.db.execute(query)
        return result.scalars().all()

    async def search(self, query_str: str) -> Sequence[Tag]:
        """Search tags by name."""
        query = (
            select(Tag)
            .where(Tag.name.ilike(f"%{query_str}%"))
            .order_by(Tag.usage_count.desc())
            .limit(50)
        )
        result = await self.db.execute(query)
        return result.scalars().all()

    async def list_storylines(self) -> Sequence[Tag]:
        """Storyline labels carried by at least one asset, alphabetically."""
        query = (
            select(Tag)
            .where(Tag.category == TagCategory.STORYLINE, Tag.usage_count > 0)
            .order_by(Tag.name.asc())
        )
        result = await self.db.execute(query)
        return result.scalars().all()
