"""
Tag endpoints - storyline labels and their usage.
"""

from fastapi import APIRouter, Query

from treasure.dependencies import DbSession, Resolver
from treasure.models.tag import TagCategory
from treasure.schemas.tag import TagListResponse, TagResponse
from treasure.services.tag_service import TagService

router = APIRouter()


@router.get("", response_model=TagListResponse)
async def list_tags(
    db: DbSession,
    category: TagCategory | None = Query(default=None, description="Filter by category"),
    q: str | None = Query(default=None, description="Search query"),
):
    """
    List tags with usage counts, most used first.

    Storyline tags are the ids accepted by the storyline load endpoint.
    """
    service = TagService(db)

    if q:
        tags = await service.search(q)
    else:
        tags = await service.list_all(category)

    items = [
        TagResponse(
            id=tag.id,
            name=tag.name,
            category=tag.category,
            usageCount=tag.usage_count,
        )
        for tag in tags
    ]

    return TagListResponse(items=items, total=len(items))


@router.get("/popular")
async def get_popular_tags(
    db: DbSession,
    limit: int = Query(default=20, ge=1, le=100, description="Number of tags to return"),
):
    """Tags with the highest usage counts."""
    service = TagService(db)
    tags = await service.get_popular(limit=limit)

    items = [
        {
            "name": tag.name,
            "category": tag.category.value,
            "usageCount": tag.usage_count,
        }
        for tag in tags
    ]

    return {"tags": items, "total": len(items)}


@router.get("/storylines")
async def list_storylines(db: DbSession, resolver: Resolver):
    """
    Storylines that can be loaded, for the organiser's story picker.

    The currently loaded storyline is flagged.
    """
    service = TagService(db)
    tags = await service.list_storylines()

    return {
        "storylines": [
            {
                "name": tag.name,
                "assetCount": tag.usage_count,
                "loaded": resolver.is_loaded(tag.name),
            }
            for tag in tags
        ],
        "total": len(tags),
    }
