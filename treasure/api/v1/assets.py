"""
Storyline asset endpoints.
Assets are registered with storyline labels and later bulk-loaded by label.
"""

import logging
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, File, Form, Query, UploadFile
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from treasure.config import get_settings
from treasure.core.exceptions import (
    PayloadTooLargeException,
    StorageException,
    ValidationException,
)
from treasure.dependencies import DbSession, Storage
from treasure.models.asset import AssetFormat
from treasure.resolver import extract_asset_index
from treasure.schemas.asset import (
    AssetCreate,
    AssetListResponse,
    AssetSearchParams,
    AssetTagsUpdate,
    AssetUpdate,
)
from treasure.services.asset_service import AssetService, compute_checksum
from treasure.storage.base import get_mime_type

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)


def _asset_to_response(asset) -> dict[str, Any]:
    """Convert Asset model to response dict."""
    return {
        "id": asset.id,
        "name": asset.name,
        "clueIndex": extract_asset_index(asset.name),
        "description": asset.description,
        "format": asset.format.value,
        "tags": [tag.name for tag in asset.tags],
        "fileSize": asset.file_size,
        "checksum": asset.checksum,
        "createdAt": asset.created_at.isoformat(),
        "updatedAt": asset.updated_at.isoformat(),
    }


@router.get("", response_model=AssetListResponse)
async def list_assets(
    db: DbSession,
    q: str | None = Query(default=None, description="Name/description search"),
    tags: str | None = Query(default=None, description="Comma-separated tag filter"),
    format: AssetFormat | None = Query(default=None, description="File format filter"),
    page: int = Query(default=1, ge=1, description="Page number"),
    size: int = Query(default=20, ge=1, le=100, description="Page size"),
):
    """Search and list registered assets with pagination."""
    params = AssetSearchParams(q=q, tags=tags, format=format, page=page, size=size)

    service = AssetService(db)
    assets, total = await service.search(params)

    pages = (total + size - 1) // size if total > 0 else 1

    return {
        "items": [_asset_to_response(asset) for asset in assets],
        "total": total,
        "page": page,
        "size": size,
        "pages": pages,
    }


@router.get("/{asset_id}")
async def get_asset(asset_id: str, db: DbSession):
    """Get asset metadata."""
    service = AssetService(db)
    asset = await service.get_by_id(asset_id)
    return _asset_to_response(asset)


@router.get("/{asset_id}/file")
async def download_asset_file(asset_id: str, db: DbSession, storage: Storage):
    """Download the asset file as a stream."""
    service = AssetService(db)
    asset = await service.get_by_id(asset_id)

    if not await storage.exists(asset.file_path):
        raise StorageException(
            message=f"File not found: {asset.file_path}",
            details={"assetId": asset_id},
        )

    filename = f"{asset.name}.{asset.format.value}"

    return StreamingResponse(
        storage.download(asset.file_path),
        media_type=get_mime_type(asset.format.value),
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(asset.file_size),
        },
    )


@router.post("", status_code=201)
async def create_asset(
    db: DbSession,
    storage: Storage,
    file: UploadFile = File(..., description="3D asset file"),
    name: str = Form(..., min_length=1, max_length=100),
    description: str = Form(default="", max_length=500),
    format: AssetFormat = Form(...),
    tags: str = Form(default="", description="Comma-separated storyline labels"),
):
    """
    Register a storyline asset.

    Accepts multipart/form-data with the asset file and its labels. The name
    should follow the clue convention, e.g. ``PirateTreasure_Clue0``.
    """
    file_content = await file.read()
    file_size = len(file_content)

    if file_size > settings.MAX_UPLOAD_SIZE:
        raise PayloadTooLargeException(settings.MAX_UPLOAD_SIZE)

    tag_list = [t.strip() for t in tags.split(",") if t.strip()] if tags else []

    try:
        create_data = AssetCreate(
            name=name,
            description=description,
            format=format,
            tags=tag_list,
        )
    except ValidationError as e:
        raise ValidationException(
            "Invalid asset metadata",
            details={"errors": [err["msg"] for err in e.errors()]},
        )

    asset_id = str(uuid4())
    file_path = f"assets/{asset_id}/{name}.{format.value}"

    await storage.upload_bytes(file_content, file_path, get_mime_type(format.value))

    service = AssetService(db)
    asset = await service.create(
        data=create_data,
        file_path=file_path,
        file_size=file_size,
        checksum=compute_checksum(file_content),
        asset_id=asset_id,
    )
    logger.info(f"Registered asset '{asset.name}' with labels {tag_list}")

    return _asset_to_response(asset)


@router.patch("/{asset_id}")
async def update_asset_metadata(asset_id: str, db: DbSession, data: AssetUpdate):
    """
    Update asset name or description.

    Renaming changes the clue index the asset resolves to on the next load.
    """
    service = AssetService(db)
    asset = await service.update_metadata(asset_id=asset_id, data=data)
    return _asset_to_response(asset)


@router.put("/{asset_id}/tags")
async def replace_asset_tags(asset_id: str, db: DbSession, data: AssetTagsUpdate):
    """Replace all storyline labels of an asset."""
    service = AssetService(db)
    asset = await service.update_tags(asset_id=asset_id, tags=data.tags)
    return _asset_to_response(asset)


@router.delete("/{asset_id}", status_code=204)
async def delete_asset(asset_id: str, db: DbSession, storage: Storage):
    """Delete an asset and its stored file."""
    service = AssetService(db)
    asset = await service.delete(asset_id)

    try:
        await storage.delete(asset.file_path)
    except StorageException as e:
        logger.warning(f"Asset {asset_id} removed but its file was not: {e.message}")

    return None
