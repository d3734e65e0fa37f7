"""
Creates a rank_change notification whenever a pointsUpdated event crosses
a rank boundary upwards.

Bus handlers are synchronous, so the insert runs as a background task on
the running loop. Pending tasks are tracked and can be awaited with
`drain()` (called on shutdown).
"""

import asyncio

from gigpoints.features.notifications.domain import RANK_CHANGE_TYPE
from gigpoints.features.notifications.repository import NotificationRepository
from gigpoints.features.points.domain import POINTS_UPDATED_CHANNEL, PointsUpdatedEvent
from gigpoints.infrastructure.observability.logging import get_logger
from gigpoints.services.events import EventBus, Subscription

logger = get_logger(__name__)


class RankChangeNotifier:
    def __init__(self, repository: NotificationRepository):
        self._repository = repository
        self._tasks: set[asyncio.Task] = set()
        self._subscription: Subscription | None = None

    def attach(self, event_bus: EventBus) -> Subscription:
        self._subscription = event_bus.subscribe(POINTS_UPDATED_CHANNEL, self.handle)
        return self._subscription

    def detach(self) -> None:
        if self._subscription:
            self._subscription.unsubscribe()
            self._subscription = None

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def handle(self, payload: dict) -> None:
        event = PointsUpdatedEvent.from_payload(payload)
        # Demotions are not announced.
        if not event.promoted:
            return

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._create_notification(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _create_notification(self, event: PointsUpdatedEvent) -> None:
        try:
            await self._repository.insert(
                event.user_id,
                title="Rank up!",
                message=f"You have reached the {event.new_rank} rank",
                stored_type=RANK_CHANGE_TYPE,
            )
        except Exception as e:
            logger.error(
                "Error creating rank change notification",
                user_id=event.user_id,
                old_rank=event.old_rank,
                new_rank=event.new_rank,
                error=str(e),
            )

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
