"""
Tag SQLAlchemy model.
Storyline labels are tags: loading a storyline fetches every asset carrying it.
"""

import enum
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from treasure.db.base import Base

if TYPE_CHECKING:
    from treasure.models.asset import Asset


class TagCategory(str, enum.Enum):
    """Tag categories."""
    STORYLINE = "storyline"     # PirateTreasure, HauntedManor
    TECHNICAL = "technical"     # lowpoly, mobile, ar


class Tag(Base):
    """Label attached to storyline assets."""
    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
        comment="Tag name (1-50 chars, unique)",
    )
    category: Mapped[TagCategory] = mapped_column(
        Enum(TagCategory),
        nullable=False,
        default=TagCategory.STORYLINE,
        index=True,
    )
    usage_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Number of assets using this tag (denormalized)",
    )

    assets: Mapped[list["Asset"]] = relationship(
        "Asset",
        secondary="asset_tags",
        back_populates="tags",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Tag(name={self.name}, category={self.category})>"
