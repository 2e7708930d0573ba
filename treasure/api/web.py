"""
Treasure image and web config endpoints.
Served at the root path, where the admin frontend and the game expect them.
"""

import logging
import re

from fastapi import APIRouter, BackgroundTasks, File, Form, UploadFile

from treasure.core.exceptions import PayloadTooLargeException, ValidationException
from treasure.dependencies import AppSettings, Images, Resolver, WebConfigStore
from treasure.schemas.web_config import DeleteImageRequest, WebConfigUpdate
from treasure.services.image_service import build_image_filename

router = APIRouter()
logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _parse_score(value: str | None) -> int | None:
    """Leading integer of a form value, None when there is none."""
    if not value:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


@router.post("/upload-treasure-image")
async def upload_treasure_image(
    images: Images,
    settings: AppSettings,
    image: UploadFile | None = File(default=None, description="Treasure photo"),
    imageName: str | None = Form(default=None),
    latitude: str | None = Form(default=None),
    longitude: str | None = Form(default=None),
    validationScore: str | None = Form(default=None),
):
    """
    Upload a treasure image.

    The config is not touched here; the frontend posts the full config to
    /upload-web-config after a successful upload.
    """
    if image is None:
        raise ValidationException("No image file provided")

    if not (image.content_type or "").startswith("image/"):
        raise ValidationException(
            "Only image files are allowed",
            details={"mimetype": image.content_type},
        )

    content = await image.read()
    if len(content) > settings.MAX_IMAGE_UPLOAD_SIZE:
        raise PayloadTooLargeException(settings.MAX_IMAGE_UPLOAD_SIZE)

    filename = build_image_filename(imageName, image.filename)
    await images.save(content, filename, image.content_type)

    logger.info(
        f"Image uploaded successfully: {filename} ({len(content)} bytes) "
        f"imageName={imageName} lat={latitude} lon={longitude} score={validationScore}"
    )

    return {
        "success": True,
        "filename": filename,
        "url": images.get_url(filename),
        "imageName": imageName,
        "validationScore": _parse_score(validationScore),
    }


@router.post("/delete-image")
async def delete_image(data: DeleteImageRequest, images: Images):
    """Delete one uploaded image. Deleting a missing file succeeds."""
    if not data.file_name:
        raise ValidationException("No fileName provided")

    if not await images.delete(data.file_name):
        return {
            "success": True,
            "message": "Image file not found (may already be deleted)",
        }

    return {
        "success": True,
        "message": "Image deleted successfully",
        "fileName": data.file_name,
    }


@router.post("/upload-web-config")
async def upload_web_config(
    data: WebConfigUpdate,
    store: WebConfigStore,
    resolver: Resolver,
    background_tasks: BackgroundTasks,
):
    """
    Replace the web config with the frontend's full state.

    A selected storyline is preloaded in the background so the game finds
    its assets ready.
    """
    config = await store.write(data)

    selected = config.storyline.selected_story if config.storyline else ""
    if selected:
        background_tasks.add_task(resolver.preload_from_config, config.storyline)

    return {
        "success": True,
        "message": "Web config updated successfully",
        "treasureCount": len(config.images),
        "treasures": [
            {"name": image.clue_name, "file": image.file_name}
            for image in config.images
        ],
        "storyline": selected or None,
    }


@router.get("/config")
async def get_config(store: WebConfigStore):
    """Current web config."""
    config = await store.read()
    return config.model_dump(by_alias=True, exclude_none=True)


@router.post("/cleanup-images")
async def cleanup_images(store: WebConfigStore, images: Images):
    """Delete uploaded images that the web config no longer references."""
    config = await store.read()
    expected = {image.file_name for image in config.images if image.file_name}

    report = await images.cleanup(expected)

    return {
        "success": True,
        "message": f"Cleanup complete. Deleted {report['deletedCount']} orphaned files.",
        **report,
    }


@router.get("/images-list")
async def list_images(images: Images):
    """Uploaded images with their URLs."""
    return {
        "success": True,
        "images": [
            {"filename": name, "url": images.get_url(name)}
            for name in await images.list_images()
        ],
    }
