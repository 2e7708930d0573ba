"""
Storyline asset resolver.

Maps clue indices to loaded storyline assets. A storyline is loaded in one
bulk operation; any index the storyline does not supply is served from the
fallback table, and indices with no fallback either resolve to None.

One resolver is created per running server and shared by every request.
It is not safe to run two loads for different storylines at once.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from treasure.core.exceptions import (
    AssetFetchException,
    StorylineNotFoundException,
    TreasureAPIException,
    ValidationException,
)
from treasure.resolver.index import build_asset_index
from treasure.resolver.sources import BulkAssetFetcher, LocationCatalog, StoryAsset
from treasure.schemas.web_config import StorylineSelection


class LoadState(str, enum.Enum):
    """Lifecycle of the current storyline."""
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadSummary:
    """Outcome of a successful storyline load."""

    storyline: str
    location_count: int
    fetched_count: int
    indices: tuple[int, ...]

    @property
    def asset_count(self) -> int:
        return len(self.indices)


@dataclass(frozen=True)
class LoadResult:
    """
    Tagged result of ``StorylineAssetResolver.load``.

    Exactly one of ``summary`` and ``error`` is set. ``error`` is one of
    ``ValidationException`` (empty id), ``StorylineNotFoundException`` or
    ``AssetFetchException``.
    """

    storyline: str
    summary: LoadSummary | None = None
    error: TreasureAPIException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> LoadSummary:
        """Return the summary, raising the load error if there is one."""
        if self.error is not None:
            raise self.error
        if self.summary is None:
            raise TreasureAPIException(
                error="load_incomplete",
                message=f"Storyline '{self.storyline}' has neither a summary nor an error",
            )
        return self.summary


class StorylineAssetResolver:
    """Resolves clue indices to storyline assets with fallback support."""

    def __init__(
        self,
        catalog: LocationCatalog,
        fetcher: BulkAssetFetcher,
        fallback_assets: Sequence[StoryAsset | None] = (),
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.catalog = catalog
        self.fetcher = fetcher
        self.fallback_assets = tuple(fallback_assets)
        self.log = logger or logging.getLogger(__name__)

        self._assets: dict[int, StoryAsset] = {}
        self._failed: set[int] = set()
        self._state = LoadState.NOT_LOADED
        self._requested = ""
        self._loaded_name = ""
        self._summary: LoadSummary | None = None

    # ===================
    # Loading
    # ===================

    async def load(self, storyline_id: str) -> LoadResult:
        """
        Load every asset labelled ``storyline_id``.

        Reloading the storyline that is already loaded returns the existing
        summary without fetching. Any other request drops the current
        assets first. Errors are returned in the result, never raised, and
        are not retried.
        """
        if not storyline_id:
            self.log.error("Storyline ID is null or empty")
            return LoadResult(
                storyline=storyline_id,
                error=ValidationException("Storyline ID is required"),
            )

        if self.is_loaded(storyline_id):
            self.log.info(
                f"Storyline '{storyline_id}' already loaded",
                extra={"storyline": storyline_id},
            )
            return LoadResult(storyline=storyline_id, summary=self._summary)

        if self._state is not LoadState.NOT_LOADED:
            self.unload()

        self._requested = storyline_id
        self._state = LoadState.LOADING
        self.log.info(
            f"Loading storyline: {storyline_id}",
            extra={"storyline": storyline_id},
        )

        try:
            locations = await self.catalog.resolve_locations(storyline_id)
        except Exception as e:
            self.log.error(
                f"Storyline label '{storyline_id}' could not be resolved: {e}",
                extra={"storyline": storyline_id},
            )
            return self._fail(
                StorylineNotFoundException(
                    storyline_id,
                    details={"cause": type(e).__name__, "reason": str(e)},
                )
            )

        if not locations:
            self.log.error(
                f"No assets found with storyline label '{storyline_id}'",
                extra={"storyline": storyline_id},
            )
            return self._fail(StorylineNotFoundException(storyline_id))

        self.log.debug(
            f"Found {len(locations)} asset locations for storyline '{storyline_id}'",
            extra={"storyline": storyline_id, "location_count": len(locations)},
        )

        try:
            fetched = await self.fetcher.fetch_all(storyline_id)
        except Exception as e:
            self.log.exception(
                f"Asset loading failed for storyline '{storyline_id}'",
                extra={"storyline": storyline_id},
            )
            return self._fail(AssetFetchException(storyline_id, e))

        self._assets = build_asset_index(fetched)
        self._state = LoadState.LOADED
        self._loaded_name = storyline_id
        self._summary = LoadSummary(
            storyline=storyline_id,
            location_count=len(locations),
            fetched_count=len(fetched),
            indices=tuple(sorted(self._assets)),
        )

        self.log.info(
            f"Storyline '{storyline_id}' loaded successfully. "
            f"{len(self._assets)} assets available.",
            extra={
                "storyline": storyline_id,
                "asset_count": len(self._assets),
                "asset_indices": list(self._summary.indices),
            },
        )
        return LoadResult(storyline=storyline_id, summary=self._summary)

    def _fail(self, error: TreasureAPIException) -> LoadResult:
        self._assets = {}
        self._state = LoadState.FAILED
        return LoadResult(storyline=self._requested, error=error)

    def unload(self) -> None:
        """Drop every loaded asset and failure record."""
        if self._loaded_name:
            self.log.info(
                f"Unloading previous storyline: {self._loaded_name}",
                extra={"storyline": self._loaded_name},
            )
        self._assets = {}
        self._failed.clear()
        self._state = LoadState.NOT_LOADED
        self._loaded_name = ""
        self._summary = None

    async def preload_from_config(self, storyline: StorylineSelection | None) -> LoadResult | None:
        """
        Load the storyline selected in the web config unless it is loaded.

        Returns:
            The load result, or None when nothing was loaded
        """
        if storyline is None or not storyline.selected_story:
            self.log.warning("No storyline config provided for preloading")
            return None

        if self.is_loaded(storyline.selected_story):
            self.log.info(f"Storyline '{storyline.selected_story}' already loaded")
            return None

        self.log.info(
            f"Preloading storyline: {storyline.selected_story} - {storyline.story_title}",
            extra={"storyline": storyline.selected_story},
        )
        result = await self.load(storyline.selected_story)
        if not result.ok:
            self.log.error(
                f"Preloading storyline '{storyline.selected_story}' failed: "
                f"{result.error.message}",
                extra={"storyline": storyline.selected_story, "error": result.error.error},
            )
        return result

    # ===================
    # Lookup
    # ===================

    def get(self, asset_index: int) -> StoryAsset | None:
        """
        Resolve a clue index.

        Returns the storyline asset, else the fallback asset, else None.
        Never raises.
        """
        asset = self._assets.get(asset_index)
        if asset is not None:
            self.log.debug(
                f"Using storyline asset for index {asset_index}: {asset.name}",
                extra={"asset_index": asset_index},
            )
            return asset

        if asset_index in self._failed:
            self.log.debug(
                f"Asset {asset_index} previously failed to resolve",
                extra={"asset_index": asset_index},
            )
            return self.fallback(asset_index)

        if self._state is not LoadState.LOADED:
            reason = f"storyline '{self._requested}' is not loaded ({self._state.value})"
        elif not self._assets:
            reason = f"storyline '{self._loaded_name}' loaded but contains no assets"
        else:
            reason = (
                f"index {asset_index} not in storyline '{self._loaded_name}' "
                f"(indices: {sorted(self._assets)})"
            )
        self.log.info(
            f"Falling back for asset {asset_index}: {reason}",
            extra={"asset_index": asset_index, "storyline": self._loaded_name},
        )

        fallback = self.fallback(asset_index)
        if fallback is None:
            self._failed.add(asset_index)
        return fallback

    def fallback(self, asset_index: int) -> StoryAsset | None:
        """Return the fallback for an index, else the first fallback, else None."""
        if 0 <= asset_index < len(self.fallback_assets):
            asset = self.fallback_assets[asset_index]
            if asset is not None:
                self.log.debug(
                    f"Using fallback asset for index {asset_index}: {asset.name}",
                    extra={"asset_index": asset_index},
                )
                return asset

        if self.fallback_assets and self.fallback_assets[0] is not None:
            self.log.warning(
                f"Using first fallback asset for index {asset_index}",
                extra={"asset_index": asset_index},
            )
            return self.fallback_assets[0]

        self.log.error(
            f"No fallback asset available for index {asset_index}",
            extra={"asset_index": asset_index},
        )
        return None

    # ===================
    # State
    # ===================

    def is_loaded(self, storyline_id: str | None = None) -> bool:
        """Whether a storyline (or the given one) is fully loaded."""
        if storyline_id:
            return self._state is LoadState.LOADED and self._loaded_name == storyline_id
        return self._state is LoadState.LOADED

    def is_asset_loaded(self, asset_index: int) -> bool:
        """Whether the index is served by the storyline itself."""
        return asset_index in self._assets

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def current_storyline(self) -> str:
        """Name of the loaded storyline, empty when none is loaded."""
        return self._loaded_name

    @property
    def requested_storyline(self) -> str:
        return self._requested

    @property
    def loaded_asset_count(self) -> int:
        return len(self._assets)

    def available_indices(self) -> list[int]:
        return sorted(self._assets)

    def describe(self) -> dict[str, Any]:
        """Status snapshot for diagnostics."""
        return {
            "state": self._state.value,
            "requestedStoryline": self._requested,
            "loadedStoryline": self._loaded_name,
            "assetCount": len(self._assets),
            "indices": self.available_indices(),
            "failedIndices": sorted(self._failed),
            "fallbackCount": sum(asset is not None for asset in self.fallback_assets),
        }
