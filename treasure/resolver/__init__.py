"""
Storyline asset resolution: clue index to loaded asset, with fallbacks.
"""

from treasure.resolver.fallback import load_fallback_assets
from treasure.resolver.index import INDEX_MARKERS, build_asset_index, extract_asset_index
from treasure.resolver.resolver import (
    LoadResult,
    LoadState,
    LoadSummary,
    StorylineAssetResolver,
)
from treasure.resolver.sources import (
    BulkAssetFetcher,
    DatabaseLocationCatalog,
    LocationCatalog,
    LocationRef,
    StorageAssetFetcher,
    StoryAsset,
)

__all__ = [
    "StorylineAssetResolver",
    "LoadResult",
    "LoadState",
    "LoadSummary",
    "LocationCatalog",
    "BulkAssetFetcher",
    "LocationRef",
    "StoryAsset",
    "DatabaseLocationCatalog",
    "StorageAssetFetcher",
    "INDEX_MARKERS",
    "extract_asset_index",
    "build_asset_index",
    "load_fallback_assets",
]
