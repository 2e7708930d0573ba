"""
Storyline endpoints.
Load a storyline by label and resolve clue indices to assets.
"""

from fastapi import APIRouter, Query
from fastapi.responses import Response

from treasure.core.exceptions import TreasureAPIException
from treasure.dependencies import Resolver
from treasure.resolver import StoryAsset, StorylineAssetResolver
from treasure.schemas.error import ErrorResponse
from treasure.schemas.storyline import (
    ClueAssetResponse,
    LoadSummaryResponse,
    ResolvedAsset,
    StorylineStatusResponse,
)

router = APIRouter()


def _status(resolver: StorylineAssetResolver, storyline: str | None) -> StorylineStatusResponse:
    return StorylineStatusResponse(
        **resolver.describe(),
        isLoaded=resolver.is_loaded(storyline),
    )


def _resolved(asset: StoryAsset, index: int) -> ResolvedAsset:
    return ResolvedAsset(
        name=asset.name,
        format=asset.format,
        assetId=asset.asset_id,
        fileSize=asset.size,
        checksum=asset.checksum,
        url=f"/api/v1/storylines/assets/{index}/file",
    )


@router.post(
    "/{storyline_id}/load",
    response_model=LoadSummaryResponse,
    responses={
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def load_storyline(storyline_id: str, resolver: Resolver):
    """
    Load every asset labelled with the storyline.

    Loading the storyline that is already loaded returns its summary
    without fetching again. A different storyline replaces it.
    """
    result = await resolver.load(storyline_id)
    summary = result.unwrap()

    return LoadSummaryResponse(
        storyline=summary.storyline,
        locationCount=summary.location_count,
        fetchedCount=summary.fetched_count,
        assetCount=summary.asset_count,
        indices=list(summary.indices),
    )


@router.get("/status", response_model=StorylineStatusResponse)
async def storyline_status(
    resolver: Resolver,
    storyline: str | None = Query(default=None, description="Check this storyline specifically"),
):
    """Current resolver state."""
    return _status(resolver, storyline)


@router.post("/unload", response_model=StorylineStatusResponse)
async def unload_storyline(resolver: Resolver):
    """Drop the loaded storyline; every index falls back until the next load."""
    resolver.unload()
    return _status(resolver, None)


@router.get("/assets/{index}", response_model=ClueAssetResponse)
async def resolve_clue_asset(index: int, resolver: Resolver):
    """
    Resolve a clue index.

    A miss is not an error: ``asset`` is null and the client renders
    nothing.
    """
    asset = resolver.get(index)

    if asset is None:
        source = "none"
    elif resolver.is_asset_loaded(index):
        source = "storyline"
    else:
        source = "fallback"

    return ClueAssetResponse(
        index=index,
        source=source,
        storyline=resolver.current_storyline,
        asset=_resolved(asset, index) if asset is not None else None,
    )


@router.get("/assets/{index}/file", responses={404: {"model": ErrorResponse}})
async def download_clue_asset(index: int, resolver: Resolver):
    """Bytes of the asset a clue index resolves to."""
    asset = resolver.get(index)
    if asset is None:
        raise TreasureAPIException(
            error="not_found",
            message=f"No asset available for clue index {index}",
            status_code=404,
        )

    return Response(
        content=asset.data,
        media_type=asset.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{asset.name}.{asset.format}"',
        },
    )
