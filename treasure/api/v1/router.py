"""
API v1 Router - Aggregates all v1 endpoints.
Base Path: /api/v1
"""

from fastapi import APIRouter

from treasure.api.v1 import assets, health, storylines, tags

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(assets.router, prefix="/assets", tags=["assets"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
api_router.include_router(storylines.router, prefix="/storylines", tags=["storylines"])
