"""
Health endpoint.
"""

from fastapi import APIRouter
from sqlalchemy import text

from treasure.db.session import is_using_sqlite_fallback
from treasure.dependencies import DbSession, Resolver

router = APIRouter()


@router.get("/health")
async def health_check(db: DbSession, resolver: Resolver):
    """
    Service health check endpoint.

    Returns:
        {"status": "ok", ...} when service is healthy
        {"status": "degraded", "issues": [...]} when there are issues
    """
    issues = []
    warnings = []

    if is_using_sqlite_fallback():
        warnings.append("Using SQLite dev fallback - PostgreSQL not configured")

    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        issues.append(f"Database: {str(e)}")

    storyline = {
        "state": resolver.state.value,
        "loaded": resolver.current_storyline,
        "assetCount": resolver.loaded_asset_count,
    }

    if issues:
        return {
            "status": "degraded",
            "issues": issues,
            "storyline": storyline,
        }

    response = {
        "status": "ok",
        "database": "sqlite (dev fallback)" if is_using_sqlite_fallback() else "postgresql",
        "storyline": storyline,
    }

    if warnings:
        response["warnings"] = warnings

    return response
