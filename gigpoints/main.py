# gigpoints/main.py
"""
Application entrypoint: logging, database pool lifecycle, service wiring.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from gigpoints.config import settings
from gigpoints.db.pool import db_pool
from gigpoints.dependencies import wire_services
from gigpoints.features.notifications.api import router as notifications_router
from gigpoints.features.notifications.repository import NotificationRepository
from gigpoints.features.points.api import leaderboard_router
from gigpoints.features.points.api import router as points_router
from gigpoints.features.points.repository import PostgresPointsStore
from gigpoints.infrastructure.observability.logging import get_logger, setup_logging
from gigpoints.middleware.request_context import RequestContextMiddleware
from gigpoints.routes import health

setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    await db_pool.initialize()

    wire_services(
        app.state,
        points_store=PostgresPointsStore(),
        notification_repository=NotificationRepository(),
        config=settings,
    )
    logger.info("All services initialized successfully")

    yield

    logger.info("Application shutting down")

    notifier = getattr(app.state, "rank_change_notifier", None)
    if notifier:
        notifier.detach()
        await notifier.drain()

    app.state.event_bus.clear()

    try:
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))


app = FastAPI(
    title="Gig Points",
    description="Points, ranks and notifications for the gig marketplace app",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)

app.include_router(health.router)
app.include_router(points_router)
app.include_router(leaderboard_router)
app.include_router(notifications_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    logger.info(
        "HTTP request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
