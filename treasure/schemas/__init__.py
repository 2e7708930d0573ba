"""
Pydantic schemas for request/response validation.
"""

from treasure.schemas.asset import (
    AssetCreate,
    AssetUpdate,
    AssetTagsUpdate,
    AssetResponse,
    AssetListResponse,
    AssetSearchParams,
)
from treasure.schemas.tag import TagResponse, TagListResponse
from treasure.schemas.error import ErrorResponse
from treasure.schemas.storyline import (
    ClueAssetResponse,
    LoadSummaryResponse,
    ResolvedAsset,
    StorylineStatusResponse,
)
from treasure.schemas.web_config import (
    StorylineSelection,
    TreasureImage,
    WebConfig,
    WebConfigUpdate,
    DeleteImageRequest,
)

__all__ = [
    # Asset schemas
    "AssetCreate",
    "AssetUpdate",
    "AssetTagsUpdate",
    "AssetResponse",
    "AssetListResponse",
    "AssetSearchParams",
    # Tag schemas
    "TagResponse",
    "TagListResponse",
    # Storyline schemas
    "LoadSummaryResponse",
    "StorylineStatusResponse",
    "ResolvedAsset",
    "ClueAssetResponse",
    # Web config schemas
    "TreasureImage",
    "StorylineSelection",
    "WebConfig",
    "WebConfigUpdate",
    "DeleteImageRequest",
    # Error schemas
    "ErrorResponse",
]
