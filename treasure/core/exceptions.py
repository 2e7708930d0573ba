"""
Custom exceptions for the treasure hunt server.
Every error response carries an error code and a human-readable message.
"""

from typing import Any


class TreasureAPIException(Exception):
    """Base exception for all treasure hunt server errors."""

    def __init__(
        self,
        error: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.error = error
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to response dictionary."""
        response = {
            "success": False,
            "error": self.error,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response


class ValidationException(TreasureAPIException):
    """400 - Malformed request (missing fields, bad file names)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="validation_failed",
            message=message,
            status_code=400,
            details=details,
        )


class AssetNotFoundException(TreasureAPIException):
    """404 - Asset not found."""

    def __init__(self, asset_id: str):
        super().__init__(
            error="not_found",
            message=f"Asset with ID '{asset_id}' not found",
            status_code=404,
        )


class StorylineNotFoundException(TreasureAPIException):
    """404 - No assets carry the requested storyline label."""

    def __init__(self, storyline_id: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="storyline_not_found",
            message=f"No assets found with storyline label '{storyline_id}'",
            status_code=404,
            details=details,
        )


class AssetFetchException(TreasureAPIException):
    """502 - Bulk fetch of storyline assets failed."""

    def __init__(self, storyline_id: str, cause: BaseException):
        super().__init__(
            error="fetch_failed",
            message=f"Failed to load assets for storyline '{storyline_id}'",
            status_code=502,
            details={
                "storyline": storyline_id,
                "cause": type(cause).__name__,
                "reason": str(cause),
            },
        )
        self.cause = cause


class PayloadTooLargeException(TreasureAPIException):
    """413 - Upload size exceeds limit."""

    def __init__(self, max_size: int):
        max_size_mb = max_size / (1024 * 1024)
        super().__init__(
            error="payload_too_large",
            message=f"Maximum upload size exceeded ({max_size_mb:.0f}MB limit)",
            status_code=413,
        )


class StorageException(TreasureAPIException):
    """500 - Storage backend error."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="storage_error",
            message=message,
            status_code=500,
            details=details,
        )


class ConfigUnavailableException(TreasureAPIException):
    """500 - Web config file missing or unreadable."""

    def __init__(self, message: str = "Failed to read config"):
        super().__init__(
            error="config_unavailable",
            message=message,
            status_code=500,
        )
