"""
FastAPI dependency injection functions.
Provides common dependencies used across endpoints.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from treasure.config import Settings, get_settings
from treasure.db.session import get_db
from treasure.resolver import StorylineAssetResolver
from treasure.services.image_service import TreasureImageService
from treasure.services.web_config_service import WebConfigService
from treasure.storage import StorageBackend, get_image_storage, get_storage


def get_resolver(request: Request) -> StorylineAssetResolver:
    """The resolver created for this server at startup."""
    return request.app.state.resolver


def get_web_config_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> WebConfigService:
    return WebConfigService(settings.WEB_CONFIG_PATH)


def get_image_service(
    storage: Annotated[StorageBackend, Depends(get_image_storage)],
) -> TreasureImageService:
    return TreasureImageService(storage)


# Type aliases for cleaner endpoint signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]
Storage = Annotated[StorageBackend, Depends(get_storage)]
AppSettings = Annotated[Settings, Depends(get_settings)]
Resolver = Annotated[StorylineAssetResolver, Depends(get_resolver)]
WebConfigStore = Annotated[WebConfigService, Depends(get_web_config_service)]
Images = Annotated[TreasureImageService, Depends(get_image_service)]
