"""Core utilities and exceptions for the treasure hunt server."""

from treasure.core.exceptions import (
    TreasureAPIException,
    AssetNotFoundException,
    ValidationException,
    PayloadTooLargeException,
    StorageException,
    StorylineNotFoundException,
    AssetFetchException,
    ConfigUnavailableException,
)

__all__ = [
    "TreasureAPIException",
    "AssetNotFoundException",
    "ValidationException",
    "PayloadTooLargeException",
    "StorageException",
    "StorylineNotFoundException",
    "AssetFetchException",
    "ConfigUnavailableException",
]
