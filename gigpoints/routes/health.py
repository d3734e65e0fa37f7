# gigpoints/routes/health.py
"""
Health check endpoints with database pool monitoring.
"""

import time

from fastapi import APIRouter, Request

from gigpoints.db.pool import db_health_check
from gigpoints.features.points.domain import POINTS_UPDATED_CHANNEL

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "gigpoints"}


@router.get("/readyz")
async def readyz(request: Request):
    """
    Readiness check: database pool plus the in-process event bus.
    """
    checks = {}
    overall_ok = True

    t0 = time.time()
    try:
        db_health = await db_health_check()
        is_healthy = db_health.get("healthy", False)
        checks["database"] = {
            "ok": is_healthy,
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        if "pool_stats" in db_health:
            checks["database"]["pool_stats"] = db_health["pool_stats"]
        if "warnings" in db_health:
            checks["database"]["warnings"] = db_health["warnings"]
        if not is_healthy:
            checks["database"]["error"] = db_health.get("error", "Database unhealthy")
        overall_ok = overall_ok and is_healthy
    except Exception as e:
        checks["database"] = {"ok": False, "error": f"{type(e).__name__}: {e}"}
        overall_ok = False

    event_bus = getattr(request.app.state, "event_bus", None)
    checks["event_bus"] = {
        "ok": event_bus is not None,
        "points_subscribers": event_bus.handler_count(POINTS_UPDATED_CHANNEL) if event_bus else 0,
    }
    overall_ok = overall_ok and event_bus is not None

    return {"overall_ok": overall_ok, "checks": checks}
