"""Tests for the health check endpoint."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from httpx import AsyncClient

from statuspage.api.version import API_VERSION


async def test_health_all_services_up(client: AsyncClient, mock_db_session: AsyncMock) -> None:
    """Health endpoint should return 'healthy' when all services are up."""
    mock_result = MagicMock()
    mock_result.scalar.return_value = 1
    mock_db_session.execute.return_value = mock_result

    response = await client.get("/api/v1/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["services"] == {"postgres": "up", "redis": "up"}
    assert data["version"] == API_VERSION


async def test_health_degraded_when_redis_down(
    client: AsyncClient,
    mock_redis_client: AsyncMock,
) -> None:
    """Health endpoint should return 'degraded' when one service is down."""
    mock_redis_client.ping.side_effect = ConnectionError("Redis down")

    response = await client.get("/api/v1/health")
    data = response.json()
    assert data["status"] == "degraded"
    assert data["services"]["redis"] == "down"
    assert data["services"]["postgres"] == "up"


async def test_health_unhealthy_when_all_down(
    client: AsyncClient,
    mock_db_session: AsyncMock,
    mock_redis_client: AsyncMock,
) -> None:
    """Health endpoint should return 'unhealthy' when all services are down."""
    mock_db_session.execute.side_effect = ConnectionError("DB down")
    mock_redis_client.ping.side_effect = ConnectionError("Redis down")

    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "unhealthy"
    assert all(s == "down" for s in data["services"].values())


async def test_security_headers(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["Cache-Control"] == "no-store"
    assert response.headers["X-API-Version"] == API_VERSION
