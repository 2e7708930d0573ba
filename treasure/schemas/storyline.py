"""
Pydantic schemas for storyline loading and clue resolution.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class LoadSummaryResponse(BaseModel):
    """Result of POST /storylines/{id}/load."""

    storyline: str
    location_count: int = Field(alias="locationCount")
    fetched_count: int = Field(alias="fetchedCount")
    asset_count: int = Field(alias="assetCount")
    indices: list[int]

    model_config = ConfigDict(populate_by_name=True)


class StorylineStatusResponse(BaseModel):
    """Resolver status snapshot."""

    state: str
    requested_storyline: str = Field(alias="requestedStoryline")
    loaded_storyline: str = Field(alias="loadedStoryline")
    asset_count: int = Field(alias="assetCount")
    indices: list[int]
    failed_indices: list[int] = Field(alias="failedIndices")
    fallback_count: int = Field(alias="fallbackCount")
    is_loaded: bool = Field(alias="isLoaded")

    model_config = ConfigDict(populate_by_name=True)


class ResolvedAsset(BaseModel):
    """Asset handed out for a clue index."""

    name: str
    format: str
    asset_id: str | None = Field(default=None, alias="assetId")
    file_size: int = Field(alias="fileSize")
    checksum: str | None = None
    url: str

    model_config = ConfigDict(populate_by_name=True)


class ClueAssetResponse(BaseModel):
    """
    Response of GET /storylines/assets/{index}.

    ``asset`` is null when neither the storyline nor the fallback table
    has anything for the index.
    """

    index: int
    source: Literal["storyline", "fallback", "none"]
    storyline: str
    asset: ResolvedAsset | None = None

    model_config = ConfigDict(populate_by_name=True)
