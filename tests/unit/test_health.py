"""
Tests for health check endpoints.
"""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from gigpoints.main import app
from gigpoints.services.events import EventBus

client = TestClient(app)


def test_healthz_endpoint():
    """Test the basic health check endpoint."""
    response = client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"


def test_readyz_endpoint_all_services_healthy(monkeypatch):
    """Test readiness endpoint when database and event bus are up."""
    bus = EventBus(name="test")
    bus.subscribe("pointsUpdated", lambda payload: None)
    monkeypatch.setattr(app.state, "event_bus", bus, raising=False)

    with patch(
        "gigpoints.routes.health.db_health_check",
        AsyncMock(return_value={"healthy": True, "pool_stats": {"pool_size": 2}}),
    ):
        response = client.get("/readyz")

    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is True
    checks = data["checks"]
    assert checks["database"]["ok"] is True
    assert checks["database"]["pool_stats"] == {"pool_size": 2}
    assert isinstance(checks["database"]["latency_ms"], (int, float))
    assert checks["event_bus"] == {"ok": True, "points_subscribers": 1}


def test_readyz_endpoint_database_unhealthy(monkeypatch):
    """Test readiness endpoint when Postgres is down."""
    monkeypatch.setattr(app.state, "event_bus", EventBus(name="test"), raising=False)

    with patch(
        "gigpoints.routes.health.db_health_check",
        AsyncMock(return_value={"healthy": False, "error": "Connection failed"}),
    ):
        response = client.get("/readyz")

    # Should still return 200, but overall_ok should be False
    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is False
    assert data["checks"]["database"]["ok"] is False
    assert data["checks"]["database"]["error"] == "Connection failed"


def test_readyz_endpoint_database_check_raises(monkeypatch):
    monkeypatch.setattr(app.state, "event_bus", EventBus(name="test"), raising=False)

    with patch(
        "gigpoints.routes.health.db_health_check",
        AsyncMock(side_effect=RuntimeError("pool not initialized")),
    ):
        response = client.get("/readyz")

    data = response.json()
    assert data["overall_ok"] is False
    assert data["checks"]["database"]["error"] == "RuntimeError: pool not initialized"


def test_readyz_without_event_bus(monkeypatch):
    monkeypatch.setattr(app.state, "event_bus", None, raising=False)

    with patch(
        "gigpoints.routes.health.db_health_check", AsyncMock(return_value={"healthy": True})
    ):
        response = client.get("/readyz")

    data = response.json()
    assert data["overall_ok"] is False
    assert data["checks"]["event_bus"]["ok"] is False
