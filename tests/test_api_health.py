"""Tests for health check endpoints."""

from httpx import AsyncClient

from tests.support import Catalog


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_ready_reports_administrators(self, client: AsyncClient, catalog: Catalog) -> None:
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready", "database": "connected", "administrators": 1}
