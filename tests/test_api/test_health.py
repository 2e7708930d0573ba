"""
Tests for health check and root endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health check endpoint returns OK status."""
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["storyline"] == {"state": "not_loaded", "loaded": "", "assetCount": 0}


@pytest.mark.asyncio
async def test_health_reports_loaded_storyline(client: AsyncClient, register_asset):
    await register_asset("PirateTreasure_Clue0", "PirateTreasure")
    await client.post("/api/v1/storylines/PirateTreasure/load")

    response = await client.get("/api/v1/health")

    assert response.json()["storyline"] == {
        "state": "loaded",
        "loaded": "PirateTreasure",
        "assetCount": 1,
    }


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    """Test root endpoint returns the service banner."""
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert "name" in data
    assert "version" in data
    assert "POST /upload-treasure-image" in data["endpoints"]
