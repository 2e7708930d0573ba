"""
Association table linking assets to their storyline labels.
"""

from sqlalchemy import Column, ForeignKey, String, Table

from treasure.db.base import Base

asset_tags = Table(
    "asset_tags",
    Base.metadata,
    Column(
        "asset_id",
        String(36),
        ForeignKey("assets.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        String(36),
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)
