"""Tests for the health check endpoints."""

from __future__ import annotations

import httpx

from articlesync import __version__


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    async def test_health_check(self, http: httpx.AsyncClient) -> None:
        response = await http.get("/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "articlesync"
        assert data["version"] == __version__
        assert data["index_backend"] == "memory"

    async def test_backend_health_check(self, http: httpx.AsyncClient) -> None:
        response = await http.get("/v1/health/backends")
        assert response.status_code == 200
        backends = response.json()["backends"]
        assert backends["primary_store"]["status"] == "healthy"
        assert backends["search_index"]["status"] == "healthy"
