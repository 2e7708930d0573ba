"""
Web config service - reads and replaces config.json.

The config is rewritten whole on every update; there is no merge and no
locking between concurrent writers.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import aiofiles
import aiofiles.os

from treasure.core.exceptions import ConfigUnavailableException, StorageException
from treasure.schemas.web_config import WebConfig, WebConfigUpdate

logger = logging.getLogger(__name__)


class WebConfigService:
    """Service class for the treasure web config file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def read(self) -> WebConfig:
        """
        Read the current config.

        Raises:
            ConfigUnavailableException: If the file is missing or invalid
        """
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
            return WebConfig.model_validate(json.loads(raw))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read config {self.path}: {e}")
            raise ConfigUnavailableException()

    async def read_or_default(self) -> WebConfig:
        """Read the config, starting fresh when it is missing or unreadable."""
        if not self.path.exists():
            logger.info("No existing config found, creating new one")
            return WebConfig()
        try:
            return await self.read()
        except ConfigUnavailableException:
            logger.warning("Failed to read existing config, starting fresh")
            return WebConfig()

    async def write(self, update: WebConfigUpdate) -> WebConfig:
        """Replace the config with the state sent by the frontend."""
        existing = await self.read_or_default()
        logger.info(
            f"Existing config: {len(existing.images)} treasures, "
            f"last updated '{existing.last_updated}'"
        )

        images = update.images or []
        config = WebConfig(
            images=images,
            lastUpdated=update.last_updated or datetime.now(timezone.utc).isoformat(),
            totalTreasures=update.total_treasures or len(images),
            storyline=update.storyline,
        )

        payload = json.dumps(
            config.model_dump(by_alias=True, exclude_none=True),
            indent=2,
        )
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageException(
                message=f"Failed to write config: {str(e)}",
                details={"path": str(self.path)},
            )

        logger.info(
            f"Config updated: {len(config.images)} treasures "
            f"{[image.clue_name for image in config.images]}"
        )
        return config
