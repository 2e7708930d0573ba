"""SQLAlchemy ORM models for the treasure hunt server."""

from treasure.models.asset import Asset, AssetFormat
from treasure.models.tag import Tag, TagCategory
from treasure.models.associations import asset_tags

__all__ = [
    "Asset",
    "AssetFormat",
    "Tag",
    "TagCategory",
    "asset_tags",
]
