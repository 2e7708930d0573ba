"""
Pydantic schemas for storyline asset request/response validation.
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from treasure.models.asset import AssetFormat

_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def _validate_tag_names(tags: list[str]) -> list[str]:
    for tag in tags:
        if not 1 <= len(tag) <= 50:
            raise ValueError(f"Each tag must be 1-50 characters, got: '{tag}'")
    return tags


# ===================
# Request Schemas
# ===================

class AssetCreate(BaseModel):
    """Schema for registering a storyline asset (POST /assets)."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Asset name carrying the clue index",
        examples=["PirateTreasure_Clue0"],
    )
    description: str = Field(default="", max_length=500)
    format: AssetFormat
    tags: list[str] = Field(
        default=[],
        max_length=20,
        description="Storyline labels (0-20 tags)",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name contains only allowed characters."""
        if not _NAME_PATTERN.match(v):
            raise ValueError("Name must contain only alphanumeric characters, underscores, and hyphens")
        return v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return _validate_tag_names(v)


class AssetUpdate(BaseModel):
    """Schema for updating asset metadata (PATCH /assets/{id})."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is not None and not _NAME_PATTERN.match(v):
            raise ValueError("Name must contain only alphanumeric characters, underscores, and hyphens")
        return v

    model_config = ConfigDict(extra="forbid")


class AssetTagsUpdate(BaseModel):
    """Schema for replacing asset tags (PUT /assets/{id}/tags)."""

    tags: list[str] = Field(..., max_length=20)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return _validate_tag_names(v)


# ===================
# Response Schemas
# ===================

class AssetResponse(BaseModel):
    """
    Registered asset.

    ``clueIndex`` is null when the name carries no index; the asset then
    takes its position in the storyline instead.
    """

    id: str
    name: str
    clue_index: int | None = Field(default=None, alias="clueIndex")
    description: str
    format: AssetFormat
    tags: list[str]
    file_size: int = Field(alias="fileSize")
    checksum: str
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class AssetListResponse(BaseModel):
    """Paginated list of assets."""

    items: list[AssetResponse]
    total: int
    page: int
    size: int
    pages: int


# ===================
# Query Parameters
# ===================

class AssetSearchParams(BaseModel):
    """Query parameters for asset search (GET /assets)."""

    q: str | None = Field(default=None, description="Name/description search")
    tags: str | None = Field(default=None, description="Comma-separated tag filter")
    format: AssetFormat | None = None
    page: int = Field(default=1, ge=1)
    size: int = Field(default=20, ge=1, le=100)
