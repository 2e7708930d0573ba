"""
Pydantic schema for error responses.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standard error response format.

    Examples:
        400: {"success": false, "error": "validation_failed", "message": "..."}
        404: {"success": false, "error": "storyline_not_found", "message": "..."}
        502: {"success": false, "error": "fetch_failed", "message": "...", "details": {...}}
    """

    success: bool = False
    error: str = Field(
        ...,
        description="Error code string",
        examples=["validation_failed", "not_found", "storyline_not_found", "fetch_failed"],
    )
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(default=None)
