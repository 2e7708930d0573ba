"""
Tests for the storyline asset resolver, using in-memory collaborators.
"""

import asyncio
import logging
from typing import Sequence

import pytest

from treasure.core.exceptions import (
    AssetFetchException,
    StorylineNotFoundException,
    TreasureAPIException,
    ValidationException,
)
from treasure.resolver import (
    BulkAssetFetcher,
    LoadResult,
    LoadState,
    LocationCatalog,
    LocationRef,
    StoryAsset,
    StorylineAssetResolver,
    load_fallback_assets,
)
from treasure.schemas.web_config import StorylineSelection

STORYLINES = {
    "PirateTreasure": ["PirateTreasure_Clue0", "PirateTreasure_Clue1", "PirateTreasure_Clue3"],
    "HauntedManor": ["HauntedManor_Clue1", "Lantern"],
    "Empty": [],
}


def _asset(name: str) -> StoryAsset:
    return StoryAsset(name=name, format="glb", data=name.encode())


class FakeCatalog(LocationCatalog):
    def __init__(self, storylines: dict[str, list[str]], error: Exception | None = None):
        self.storylines = storylines
        self.error = error
        self.calls: list[str] = []

    async def resolve_locations(self, tag: str) -> Sequence[LocationRef]:
        self.calls.append(tag)
        if self.error:
            raise self.error
        return [
            LocationRef(asset_id=name, name=name, path=f"{tag}/{name}.glb")
            for name in self.storylines.get(tag, [])
        ]


class FakeFetcher(BulkAssetFetcher):
    def __init__(self, storylines: dict[str, list[str]], error: Exception | None = None):
        self.storylines = storylines
        self.error = error
        self.calls: list[str] = []
        self.handles: dict[str, StoryAsset] = {}

    async def fetch_all(self, tag: str) -> Sequence[tuple[str, StoryAsset]]:
        self.calls.append(tag)
        if self.error:
            raise self.error
        entries = []
        for name in self.storylines.get(tag, []):
            handle = self.handles.setdefault(name, _asset(name))
            entries.append((name, handle))
        return entries


FALLBACK_CHEST = _asset("DefaultChest")
FALLBACK_MAP = _asset("DefaultMap")


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog(STORYLINES)


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher(STORYLINES)


@pytest.fixture
def resolver(catalog, fetcher) -> StorylineAssetResolver:
    return StorylineAssetResolver(
        catalog,
        fetcher,
        fallback_assets=(FALLBACK_CHEST, None, FALLBACK_MAP),
    )


class TestLoad:
    """Loading storylines."""

    @pytest.mark.asyncio
    async def test_successful_load(self, resolver: StorylineAssetResolver):
        result = await resolver.load("PirateTreasure")

        assert result.ok
        assert result.summary.indices == (0, 1, 3)
        assert result.summary.location_count == 3
        assert result.summary.fetched_count == 3
        assert resolver.is_loaded("PirateTreasure")
        assert resolver.is_loaded()
        assert not resolver.is_loaded("HauntedManor")
        assert resolver.state is LoadState.LOADED
        assert resolver.current_storyline == "PirateTreasure"
        assert resolver.loaded_asset_count == 3

    @pytest.mark.asyncio
    async def test_empty_id_fails_without_fetching(self, resolver, catalog, fetcher):
        result = await resolver.load("")

        assert not result.ok
        assert isinstance(result.error, ValidationException)
        assert catalog.calls == []
        assert fetcher.calls == []
        assert resolver.state is LoadState.NOT_LOADED

    @pytest.mark.asyncio
    async def test_unknown_storyline(self, resolver, fetcher):
        result = await resolver.load("Ghost")

        assert isinstance(result.error, StorylineNotFoundException)
        assert result.error.status_code == 404
        assert resolver.available_indices() == []
        assert resolver.state is LoadState.FAILED
        assert resolver.requested_storyline == "Ghost"
        assert fetcher.calls == []

    @pytest.mark.asyncio
    async def test_storyline_with_no_locations(self, resolver):
        result = await resolver.load("Empty")

        assert isinstance(result.error, StorylineNotFoundException)

    @pytest.mark.asyncio
    async def test_catalog_error_is_unknown_storyline(self, fetcher):
        resolver = StorylineAssetResolver(FakeCatalog(STORYLINES, error=ConnectionError("offline")), fetcher)

        result = await resolver.load("PirateTreasure")

        assert isinstance(result.error, StorylineNotFoundException)
        assert result.error.details == {"cause": "ConnectionError", "reason": "offline"}
        assert fetcher.calls == []

    @pytest.mark.asyncio
    async def test_fetch_failure(self, catalog):
        cause = TimeoutError("bundle download timed out")
        resolver = StorylineAssetResolver(catalog, FakeFetcher(STORYLINES, error=cause))

        result = await resolver.load("PirateTreasure")

        assert isinstance(result.error, AssetFetchException)
        assert result.error.cause is cause
        assert result.error.status_code == 502
        assert resolver.state is LoadState.FAILED
        assert resolver.available_indices() == []
        assert not resolver.is_loaded("PirateTreasure")

    @pytest.mark.asyncio
    async def test_failed_load_is_retried_by_caller(self, catalog):
        fetcher = FakeFetcher(STORYLINES, error=TimeoutError())
        resolver = StorylineAssetResolver(catalog, fetcher)
        await resolver.load("PirateTreasure")

        fetcher.error = None
        result = await resolver.load("PirateTreasure")

        assert result.ok
        assert fetcher.calls == ["PirateTreasure", "PirateTreasure"]

    @pytest.mark.asyncio
    async def test_reloading_loaded_storyline_is_a_no_op(self, resolver, catalog, fetcher):
        first = await resolver.load("PirateTreasure")
        second = await resolver.load("PirateTreasure")

        assert second.summary == first.summary
        assert catalog.calls == ["PirateTreasure"]
        assert fetcher.calls == ["PirateTreasure"]

    @pytest.mark.asyncio
    async def test_loading_another_storyline_clears_previous(self, resolver, fetcher):
        await resolver.load("PirateTreasure")
        pirate_clue0 = fetcher.handles["PirateTreasure_Clue0"]
        pirate_clue3 = fetcher.handles["PirateTreasure_Clue3"]

        await resolver.load("HauntedManor")

        assert resolver.is_loaded("HauntedManor")
        assert not resolver.is_loaded("PirateTreasure")
        # "Lantern" has no index and sits at position 1, but the named clue 1 wins
        assert resolver.available_indices() == [1]
        assert resolver.get(0) is FALLBACK_CHEST
        assert resolver.get(0) is not pirate_clue0
        assert resolver.get(3) is FALLBACK_CHEST
        assert resolver.get(3) is not pirate_clue3

    @pytest.mark.asyncio
    async def test_failed_load_drops_previous_storyline(self, resolver):
        await resolver.load("PirateTreasure")

        await resolver.load("Ghost")

        assert resolver.available_indices() == []
        assert resolver.current_storyline == ""

    @pytest.mark.asyncio
    async def test_unwrap(self, resolver):
        ok = await resolver.load("PirateTreasure")
        assert ok.unwrap() is ok.summary

        failed = await resolver.load("Ghost")
        with pytest.raises(StorylineNotFoundException):
            failed.unwrap()

        with pytest.raises(TreasureAPIException) as exc_info:
            LoadResult(storyline="PirateTreasure").unwrap()
        assert exc_info.value.error == "load_incomplete"

    @pytest.mark.asyncio
    async def test_load_logs_structured_fields(self, resolver, caplog):
        with caplog.at_level(logging.INFO, logger="treasure.resolver.resolver"):
            await resolver.load("PirateTreasure")

        loaded = [r for r in caplog.records if "loaded successfully" in r.getMessage()]
        assert loaded[0].storyline == "PirateTreasure"
        assert loaded[0].asset_indices == [0, 1, 3]

    @pytest.mark.asyncio
    async def test_injected_logger(self, catalog, fetcher, caplog):
        log = logging.getLogger("game.session")
        resolver = StorylineAssetResolver(catalog, fetcher, logger=log)

        with caplog.at_level(logging.INFO, logger="game.session"):
            await resolver.load("PirateTreasure")

        assert any(r.name == "game.session" for r in caplog.records)


class TestGet:
    """Resolving clue indices."""

    @pytest.mark.asyncio
    async def test_loaded_index_returns_mapped_handle(self, resolver, fetcher):
        await resolver.load("PirateTreasure")

        for name, index in (("PirateTreasure_Clue0", 0), ("PirateTreasure_Clue3", 3)):
            assert resolver.get(index) is fetcher.handles[name]
            assert resolver.is_asset_loaded(index)

    def test_missing_index_uses_its_fallback_slot(self, resolver):
        assert resolver.get(2) is FALLBACK_MAP
        assert not resolver.is_asset_loaded(2)

    @pytest.mark.asyncio
    async def test_unloaded_index_in_loaded_storyline_falls_back(self, resolver):
        await resolver.load("PirateTreasure")

        assert resolver.get(2) is FALLBACK_MAP

    def test_empty_slot_uses_first_fallback(self, resolver):
        assert resolver.get(1) is FALLBACK_CHEST

    def test_out_of_range_uses_first_fallback(self, resolver):
        assert resolver.get(42) is FALLBACK_CHEST
        assert resolver.get(-1) is FALLBACK_CHEST

    def test_miss_without_fallbacks_is_idempotent(self, catalog, fetcher):
        resolver = StorylineAssetResolver(catalog, fetcher)

        assert resolver.get(4) is None
        assert resolver.get(4) is None
        assert resolver.describe()["failedIndices"] == [4]

    def test_empty_first_slot_is_a_miss(self, catalog, fetcher):
        resolver = StorylineAssetResolver(catalog, fetcher, fallback_assets=(None, FALLBACK_MAP))

        assert resolver.get(1) is FALLBACK_MAP
        assert resolver.get(0) is None
        assert resolver.get(7) is None

    def test_fallback_hit_is_not_recorded_as_failure(self, resolver):
        resolver.get(2)
        resolver.get(9)

        assert resolver.describe()["failedIndices"] == []

    @pytest.mark.asyncio
    async def test_unload_clears_failures(self, catalog, fetcher):
        resolver = StorylineAssetResolver(catalog, fetcher)
        resolver.get(4)
        await resolver.load("PirateTreasure")

        resolver.unload()

        assert resolver.state is LoadState.NOT_LOADED
        assert resolver.describe()["failedIndices"] == []
        assert resolver.get(0) is None


class GatedFetcher(FakeFetcher):
    """Holds ``fetch_all`` open until the gate is released."""

    def __init__(self, storylines: dict[str, list[str]]):
        super().__init__(storylines)
        self.started = asyncio.Event()
        self.gate = asyncio.Event()

    async def fetch_all(self, tag: str) -> Sequence[tuple[str, StoryAsset]]:
        self.started.set()
        await self.gate.wait()
        return await super().fetch_all(tag)


class TestLoadInFlight:
    """Lookups while a load is still running."""

    @pytest.mark.asyncio
    async def test_get_during_load_uses_fallback(self, catalog):
        fetcher = GatedFetcher(STORYLINES)
        resolver = StorylineAssetResolver(
            catalog,
            fetcher,
            fallback_assets=(FALLBACK_CHEST, None, FALLBACK_MAP),
        )

        task = asyncio.create_task(resolver.load("PirateTreasure"))
        await fetcher.started.wait()

        assert resolver.state is LoadState.LOADING
        assert not resolver.is_loaded()
        assert resolver.get(0) is FALLBACK_CHEST
        assert not resolver.is_asset_loaded(0)

        fetcher.gate.set()
        result = await task

        assert result.ok
        assert resolver.state is LoadState.LOADED
        assert resolver.get(0) is fetcher.handles["PirateTreasure_Clue0"]
        assert resolver.describe()["failedIndices"] == []


class TestPreload:
    """Preloading the storyline chosen in the web config."""

    @pytest.mark.asyncio
    async def test_no_selection(self, resolver, catalog):
        assert await resolver.preload_from_config(None) is None
        assert await resolver.preload_from_config(StorylineSelection()) is None
        assert catalog.calls == []

    @pytest.mark.asyncio
    async def test_preload_selected_storyline(self, resolver):
        selection = StorylineSelection(selectedStory="PirateTreasure", storyTitle="The Pirate's Chest")

        result = await resolver.preload_from_config(selection)

        assert result.ok
        assert resolver.is_loaded("PirateTreasure")

    @pytest.mark.asyncio
    async def test_already_loaded_is_skipped(self, resolver, fetcher):
        await resolver.load("PirateTreasure")

        result = await resolver.preload_from_config(StorylineSelection(selectedStory="PirateTreasure"))

        assert result is None
        assert fetcher.calls == ["PirateTreasure"]

    @pytest.mark.asyncio
    async def test_failed_preload_returns_error(self, resolver):
        result = await resolver.preload_from_config(StorylineSelection(selectedStory="Ghost"))

        assert isinstance(result.error, StorylineNotFoundException)


@pytest.mark.asyncio
async def test_describe(resolver):
    await resolver.load("PirateTreasure")

    assert resolver.describe() == {
        "state": "loaded",
        "requestedStoryline": "PirateTreasure",
        "loadedStoryline": "PirateTreasure",
        "assetCount": 3,
        "indices": [0, 1, 3],
        "failedIndices": [],
        "fallbackCount": 2,
    }


@pytest.mark.asyncio
async def test_load_fallback_assets(tmp_path):
    chest = tmp_path / "DefaultChest.GLB"
    chest.write_bytes(b"chest bytes")

    table = await load_fallback_assets([str(chest), "", str(tmp_path / "missing.glb")])

    assert len(table) == 3
    assert table[0].name == "DefaultChest"
    assert table[0].format == "glb"
    assert table[0].data == b"chest bytes"
    assert table[1] is None
    assert table[2] is None
