"""Health endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status and version."""
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["server"] == "ok"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_needs_no_token(client):
    """Health is on the public list, no Authorization header required."""
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    assert "WWW-Authenticate" not in resp.headers


@pytest.mark.asyncio
async def test_health_reports_dependencies(client):
    """Each dependency is reported; no Redis in tests means degraded, not an error."""
    data = (await client.get("/api/v1/health")).json()
    assert data["database"] == "ok"
    assert "redis" in data
    assert data["status"] in ("healthy", "degraded")


@pytest.mark.asyncio
async def test_health_hides_dependency_errors(client, monkeypatch):
    """A failing dependency reports "error"; the exception text stays in the logs."""
    from taskboard.api import health

    async def leaky_redis():
        raise ConnectionError("redis://:hunter2@cache.internal:6379 refused")

    monkeypatch.setattr(health, "_check_redis", leaky_redis)
    resp = await client.get("/api/v1/health")
    data = resp.json()
    assert data["redis"] == "error"
    assert data["status"] == "degraded"
    assert "hunter2" not in resp.text
