"""
Locally bundled fallback assets.
"""

import logging
from pathlib import Path
from typing import Sequence

import aiofiles

from treasure.resolver.sources import StoryAsset

logger = logging.getLogger(__name__)


async def load_fallback_assets(paths: Sequence[str]) -> tuple[StoryAsset | None, ...]:
    """
    Read the configured fallback files into a positional table.

    An empty path, or a file that cannot be read, leaves its slot empty so
    later slots keep their index.
    """
    table: list[StoryAsset | None] = []

    for slot, raw_path in enumerate(paths):
        if not raw_path:
            table.append(None)
            continue

        path = Path(raw_path)
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except OSError as e:
            logger.warning(
                f"Fallback asset {slot} unavailable at '{path}': {e}",
                extra={"asset_index": slot},
            )
            table.append(None)
            continue

        table.append(
            StoryAsset(name=path.stem, format=path.suffix.lstrip(".").lower(), data=data)
        )

    logger.info(
        f"Loaded {sum(asset is not None for asset in table)} of {len(table)} fallback assets"
    )
    return tuple(table)
