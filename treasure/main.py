"""
Treasure Hunt Storyline Server - Main Application Entry Point.

Serves treasure images and the web config to the admin frontend, and
storyline assets to the AR game.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from treasure import __version__
from treasure.api.v1.router import api_router
from treasure.api.web import router as web_router
from treasure.config import get_settings
from treasure.core.exceptions import TreasureAPIException
from treasure.db.session import AsyncSessionLocal, engine, is_using_sqlite_fallback
from treasure.resolver import (
    DatabaseLocationCatalog,
    StorageAssetFetcher,
    StorylineAssetResolver,
    load_fallback_assets,
)
from treasure.services.web_config_service import WebConfigService
from treasure.storage import get_storage_backend

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Static directories must exist before they are mounted
for _directory in (settings.IMAGES_DIR, settings.SERVER_DATA_DIR):
    Path(_directory).mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    Creates the storyline resolver and preloads the selected storyline.
    """
    logger.info(f"Starting {settings.PROJECT_NAME}")
    logger.info(f"Storage backend: {settings.STORAGE_BACKEND}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    if is_using_sqlite_fallback():
        logger.warning("[DEV MODE] Using SQLite fallback database")
        logger.info("Creating SQLite development tables...")
        from treasure.db.base import Base
        # Import all models to register them
        from treasure.models import Asset, Tag, asset_tags  # noqa: F401
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Development database ready")
    else:
        logger.info("Database: PostgreSQL")

    fallback_assets = await load_fallback_assets(settings.FALLBACK_ASSETS)
    resolver = StorylineAssetResolver(
        catalog=DatabaseLocationCatalog(AsyncSessionLocal),
        fetcher=StorageAssetFetcher(AsyncSessionLocal, get_storage_backend()),
        fallback_assets=fallback_assets,
    )
    app.state.resolver = resolver

    if settings.DEFAULT_STORYLINE:
        result = await resolver.load(settings.DEFAULT_STORYLINE)
        if not result.ok:
            logger.error(
                f"Default storyline '{settings.DEFAULT_STORYLINE}' failed to load: "
                f"{result.error.message}"
            )
    else:
        config = await WebConfigService(settings.WEB_CONFIG_PATH).read_or_default()
        if config.storyline and config.storyline.selected_story:
            await resolver.preload_from_config(config.storyline)

    yield

    resolver.unload()
    logger.info(f"Shutting down {settings.PROJECT_NAME}")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
## Treasure Hunt Storyline Server

Backend for the AR treasure hunt.

### Features
- **Treasure Images**: Upload, list, delete and prune clue photos
- **Web Config**: The hunt configuration edited by the admin frontend
- **Storyline Assets**: Register assets under storyline labels and resolve
  clue indices to them, with bundled fallbacks

### Asset naming
Storyline assets are named `<Storyline>_Clue<N>`; `_Asset<N>` and `_<N>`
are accepted too.
    """,
    version=__version__,
    openapi_tags=[
        {"name": "treasure", "description": "Treasure images and web config"},
        {"name": "storylines", "description": "Storyline loading and clue resolution"},
        {"name": "assets", "description": "Storyline asset registry"},
        {"name": "tags", "description": "Storyline labels"},
        {"name": "health", "description": "Service health checks"},
    ],
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TreasureAPIException)
async def treasure_exception_handler(request: Request, exc: TreasureAPIException) -> JSONResponse:
    """Return the standard error body for application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all exception handler for unexpected errors.
    Logs the full error but returns a sanitized response.
    """
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "internal_error",
            "message": "An unexpected error occurred",
        },
    )


app.include_router(api_router, prefix=settings.API_V1_PREFIX)
app.include_router(web_router, tags=["treasure"])

app.mount("/images", StaticFiles(directory=settings.IMAGES_DIR), name="images")
app.mount("/ServerData", StaticFiles(directory=settings.SERVER_DATA_DIR), name="server-data")


@app.get("/", include_in_schema=False)
async def root():
    """Service banner."""
    return {
        "name": settings.PROJECT_NAME,
        "version": __version__,
        "message": "Treasure hunt image server is running",
        "docs": "/docs",
        "api": settings.API_V1_PREFIX,
        "endpoints": [
            "POST /upload-treasure-image",
            "POST /delete-image",
            "POST /upload-web-config",
            "GET /config",
            "POST /cleanup-images",
            "GET /images-list",
            "GET /images/<file>",
            "GET /ServerData/<path>",
            f"POST {settings.API_V1_PREFIX}/storylines/{{storyline}}/load",
            f"GET {settings.API_V1_PREFIX}/storylines/assets/{{index}}",
        ],
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "treasure.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
