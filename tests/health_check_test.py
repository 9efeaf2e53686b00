from unittest.mock import AsyncMock

from src.fuel_ledger.cache.redis import redis_manager
from src.fuel_ledger.database.database import DatabaseManager


async def test_health_check(async_client):
    DatabaseManager.is_connected = True
    response = await async_client.get("/health")
    assert response.status_code == 200, response.text
    data = response.json()
    assert data == {"status": "ok", "database": "connected", "cache": "disabled"}


async def test_health_check_reports_cache(async_client):
    DatabaseManager.is_connected = False
    redis_manager.redis_client = AsyncMock()
    response = await async_client.get("/health")
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["database"] == "disconnected"
    assert data["cache"] == "connected"
