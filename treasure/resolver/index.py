"""
Clue index extraction from storyline asset names.

Asset names follow the convention ``<Storyline>_Clue<N>`` (also accepted:
``_Asset<N>`` and a bare ``_<N>``). Names that carry no index are placed at
their position in the fetch result.
"""

import logging
import re
from typing import Sequence, TypeVar

logger = logging.getLogger(__name__)

H = TypeVar("H")

# Searched in priority order; the rightmost occurrence of each is used.
INDEX_MARKERS = ("_Clue", "_Asset", "_")

_DIGITS = re.compile(r"[0-9]+")


def extract_asset_index(identifier: str) -> int | None:
    """
    Extract the clue index from an asset identifier.

    Examples:
        >>> extract_asset_index("PirateTreasure_Clue0")
        0
        >>> extract_asset_index("Relic_Asset3")
        3
        >>> extract_asset_index("Item_7")
        7
        >>> extract_asset_index("NoPattern") is None
        True

    Returns:
        The non-negative index, or None if no index can be derived
    """
    for marker in INDEX_MARKERS:
        position = identifier.rfind(marker)
        if position < 0:
            continue
        suffix = identifier[position + len(marker):]
        if _DIGITS.fullmatch(suffix):
            return int(suffix)

    # Last resort: a single trailing digit
    if identifier and _DIGITS.fullmatch(identifier[-1]):
        return int(identifier[-1])

    return None


def build_asset_index(entries: Sequence[tuple[str, H]]) -> dict[int, H]:
    """
    Map fetched ``(identifier, handle)`` pairs to clue indices.

    Identifiers without a derivable index take their position in ``entries``.
    A parsed index always wins over a positional one on the same key; among
    parsed indices the later entry wins.
    """
    parsed: dict[int, H] = {}
    positional: dict[int, H] = {}

    for position, (identifier, handle) in enumerate(entries):
        index = extract_asset_index(identifier)
        if index is None:
            logger.warning(
                f"Could not extract asset index from '{identifier}', "
                f"using sequential index {position}",
                extra={"identifier": identifier, "asset_index": position},
            )
            positional[position] = handle
            continue

        if index in parsed:
            logger.warning(
                f"Asset '{identifier}' replaces an earlier asset at index {index}",
                extra={"identifier": identifier, "asset_index": index},
            )
        parsed[index] = handle

    shadowed = sorted(positional.keys() & parsed.keys())
    if shadowed:
        logger.warning(
            f"Sequential indices {shadowed} collide with named clue indices; "
            "named assets take priority",
            extra={"asset_indices": shadowed},
        )

    return {**positional, **parsed}
