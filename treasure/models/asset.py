"""
Storyline asset SQLAlchemy model.
A registered asset is a stored 3D file labelled with one or more storylines.
"""

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import BigInteger, DateTime, Enum, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from treasure.db.base import Base

if TYPE_CHECKING:
    from treasure.models.tag import Tag


class AssetFormat(str, enum.Enum):
    """Supported 3D asset file formats."""
    GLTF = "gltf"
    GLB = "glb"
    USDZ = "usdz"
    FBX = "fbx"
    OBJ = "obj"
    BUNDLE = "bundle"


class Asset(Base):
    """
    Storyline asset entity.

    The name follows the clue naming convention (e.g. ``PirateTreasure_Clue0``)
    and is what the resolver extracts the clue index from.
    """
    __tablename__ = "assets"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
        comment="Globally unique identifier",
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Asset name, carries the clue index",
    )
    description: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default="",
    )
    format: Mapped[AssetFormat] = mapped_column(
        Enum(AssetFormat),
        nullable=False,
        comment="Primary file format",
    )
    file_path: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Storage reference path",
    )
    file_size: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="File size in bytes",
    )
    checksum: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="SHA-256 hash of file",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="Registration timestamp",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        comment="Last modification timestamp",
    )

    tags: Mapped[list["Tag"]] = relationship(
        "Tag",
        secondary="asset_tags",
        back_populates="assets",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Asset(id={self.id}, name={self.name}, format={self.format})>"
