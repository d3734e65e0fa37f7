"""
Service wiring and FastAPI dependencies.

`wire_services` builds one EventBus and the services that share it and
stores them on `app.state`. Route handlers fetch them through the
`get_*` dependencies below, which tests can override.
"""

from fastapi import Request

from gigpoints.config import Settings
from gigpoints.features.notifications.repository import NotificationRepository
from gigpoints.features.notifications.services import NotificationService, RankChangeNotifier
from gigpoints.features.points.repository import PointsStore
from gigpoints.features.points.services import (
    DailyLoginBonusGate,
    PointsLedger,
    PointsQueryService,
)
from gigpoints.infrastructure.observability.logging import get_logger
from gigpoints.services.events import EventBus

logger = get_logger(__name__)


def wire_services(
    state,
    *,
    points_store: PointsStore,
    notification_repository: NotificationRepository,
    config: Settings,
) -> None:
    event_bus = EventBus(name="app")
    ledger = PointsLedger(
        points_store,
        event_bus,
        timeout_s=config.POINTS_STORE_TIMEOUT_S,
        max_retries=config.POINTS_MAX_CAS_RETRIES,
    )

    state.event_bus = event_bus
    state.points_store = points_store
    state.points_ledger = ledger
    state.daily_login_gate = DailyLoginBonusGate(
        points_store,
        ledger,
        timeout_s=config.POINTS_STORE_TIMEOUT_S,
        advance_on_failure=config.DAILY_BONUS_ADVANCE_ON_FAILURE,
    )
    state.points_query = PointsQueryService(points_store)
    state.notification_service = NotificationService(notification_repository)

    state.rank_change_notifier = None
    if config.RANK_CHANGE_NOTIFICATIONS:
        notifier = RankChangeNotifier(notification_repository)
        notifier.attach(event_bus)
        state.rank_change_notifier = notifier

    logger.info(
        "Points services wired",
        atomic_increment=getattr(points_store, "supports_atomic_increment", False),
        rank_change_notifications=config.RANK_CHANGE_NOTIFICATIONS,
    )


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


def get_points_ledger(request: Request) -> PointsLedger:
    return request.app.state.points_ledger


def get_daily_login_gate(request: Request) -> DailyLoginBonusGate:
    return request.app.state.daily_login_gate


def get_points_query(request: Request) -> PointsQueryService:
    return request.app.state.points_query


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service
