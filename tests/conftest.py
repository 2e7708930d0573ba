"""
Pytest configuration and fixtures for treasure hunt server tests.
"""

import os
import shutil
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

# Settings are cached on first import; point every directory at a scratch
# location before the application is imported.
_SCRATCH = Path(tempfile.mkdtemp(prefix="treasure-tests-"))
os.environ.setdefault("IMAGES_DIR", str(_SCRATCH / "images"))
os.environ.setdefault("SERVER_DATA_DIR", str(_SCRATCH / "ServerData"))
os.environ.setdefault("WEB_CONFIG_PATH", str(_SCRATCH / "config.json"))
os.environ.setdefault("LOCAL_STORAGE_PATH", str(_SCRATCH / "storage"))
os.environ.setdefault("SQLITE_FALLBACK_URL", f"sqlite+aiosqlite:///{_SCRATCH / 'dev.db'}")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from treasure.config import get_settings
from treasure.db.base import Base
from treasure.db.session import get_db
from treasure.dependencies import get_resolver, get_web_config_service
from treasure.main import app
from treasure.models import Asset, Tag, asset_tags  # noqa: F401
from treasure.resolver import (
    DatabaseLocationCatalog,
    StorageAssetFetcher,
    StoryAsset,
    StorylineAssetResolver,
)
from treasure.services.web_config_service import WebConfigService
from treasure.storage import LocalStorageBackend, get_image_storage, get_storage


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a test database engine backed by a scratch SQLite file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory shared by request handlers and the resolver."""
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def test_storage(tmp_path) -> LocalStorageBackend:
    """Create a test storage backend for storyline assets."""
    return LocalStorageBackend(base_path=str(tmp_path / "storage"))


@pytest.fixture
def image_storage():
    """
    Storage for treasure images.

    Uses the directory mounted at /images so static serving can be checked.
    """
    images_dir = Path(get_settings().IMAGES_DIR)
    storage = LocalStorageBackend(base_path=str(images_dir), url_prefix="/images")
    yield storage
    for entry in images_dir.iterdir():
        if entry.is_dir():
            shutil.rmtree(entry)
        else:
            entry.unlink()


@pytest.fixture
def web_config(tmp_path) -> WebConfigService:
    return WebConfigService(tmp_path / "config.json")


@pytest.fixture
def fallback_assets() -> tuple[StoryAsset | None, ...]:
    """Two bundled fallbacks, the second slot left empty."""
    return (
        StoryAsset(name="DefaultChest", format="glb", data=b"default chest"),
        None,
        StoryAsset(name="DefaultMap", format="glb", data=b"default map"),
    )


@pytest.fixture
def resolver(session_factory, test_storage, fallback_assets) -> StorylineAssetResolver:
    """Resolver reading the test database and storage."""
    return StorylineAssetResolver(
        catalog=DatabaseLocationCatalog(session_factory),
        fetcher=StorageAssetFetcher(session_factory, test_storage),
        fallback_assets=fallback_assets,
    )


@pytest_asyncio.fixture(scope="function")
async def client(
    session_factory,
    test_storage,
    image_storage,
    web_config,
    resolver,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: test_storage
    app.dependency_overrides[get_image_storage] = lambda: image_storage
    app.dependency_overrides[get_web_config_service] = lambda: web_config
    app.dependency_overrides[get_resolver] = lambda: resolver

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_asset_data() -> dict[str, Any]:
    """Sample asset registration form."""
    return {
        "name": "PirateTreasure_Clue0",
        "description": "Chest hidden under the old oak",
        "format": "glb",
        "tags": "PirateTreasure,mobile",
    }


@pytest.fixture
def sample_file_content() -> bytes:
    """Sample file content for testing uploads."""
    return b"fake glb binary content for testing"


@pytest.fixture
def register_asset(client: AsyncClient, sample_file_content: bytes):
    """Register a storyline asset through the API and return its JSON."""

    async def _register(name: str, tags: str, content: bytes | None = None) -> dict[str, Any]:
        response = await client.post(
            "/api/v1/assets",
            data={"name": name, "format": "glb", "tags": tags},
            files={"file": (f"{name}.glb", content or sample_file_content, "model/gltf-binary")},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register
