"""
Business logic services for the treasure hunt server.
"""

from treasure.services.asset_service import AssetService, compute_checksum
from treasure.services.image_service import TreasureImageService, build_image_filename
from treasure.services.tag_service import TagService
from treasure.services.web_config_service import WebConfigService

__all__ = [
    "AssetService",
    "TagService",
    "TreasureImageService",
    "WebConfigService",
    "build_image_filename",
    "compute_checksum",
]
