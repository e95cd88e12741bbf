"""Health endpoint tests."""

import pytest

from taskmanager.db.engine import get_db
from taskmanager.main import app


@pytest.mark.asyncio
async def test_health_returns_ok(unauthenticated_client):
    """Health needs no token and reports server, version and database."""
    resp = await unauthenticated_client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert "version" in data


class _BrokenSession:
    async def execute(self, *args, **kwargs):
        raise ConnectionRefusedError("database is down")


@pytest.mark.asyncio
async def test_health_degraded_when_database_unreachable(unauthenticated_client):
    async def broken_db():
        yield _BrokenSession()

    app.dependency_overrides[get_db] = broken_db

    resp = await unauthenticated_client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["database"].startswith("error:")
