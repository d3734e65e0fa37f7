"""
Notification service.

Read/mark/delete operations behind the notifications screen plus the
banner selection used by the client's notification context. Every
operation reports failure through its return value and logs the cause.
"""

from gigpoints.features.notifications.domain import (
    RANK_BANNER_DURATION_MS,
    Banner,
    Notification,
)
from gigpoints.features.notifications.repository import NotificationRepository
from gigpoints.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    def __init__(self, repository: NotificationRepository):
        self._repository = repository

    async def list_notifications(self, user_id: str, limit: int = 50) -> list[Notification]:
        try:
            return await self._repository.list_for_user(user_id, limit)
        except Exception as e:
            logger.error("Error fetching notifications", user_id=user_id, error=str(e))
            return []

    async def unread_count(self, user_id: str) -> int:
        try:
            return await self._repository.count_unread(user_id)
        except Exception as e:
            logger.error("Error counting unread notifications", user_id=user_id, error=str(e))
            return 0

    async def mark_as_read(self, user_id: str, notification_id: str) -> bool:
        try:
            return await self._repository.mark_read(user_id, notification_id)
        except Exception as e:
            logger.error(
                "Error marking notification as read",
                user_id=user_id,
                notification_id=notification_id,
                error=str(e),
            )
            return False

    async def mark_all_as_read(self, user_id: str) -> bool:
        try:
            updated = await self._repository.mark_all_read(user_id)
            logger.info("Notifications marked as read", user_id=user_id, count=updated)
            return True
        except Exception as e:
            logger.error("Error marking all notifications as read", user_id=user_id, error=str(e))
            return False

    async def delete_notification(self, user_id: str, notification_id: str) -> bool:
        try:
            return await self._repository.delete(user_id, notification_id)
        except Exception as e:
            logger.error(
                "Error deleting notification",
                user_id=user_id,
                notification_id=notification_id,
                error=str(e),
            )
            return False

    async def next_banner(self, user_id: str) -> Banner | None:
        """
        Newest unread rank notification as a banner, marked read once picked.
        """
        notifications = await self.list_notifications(user_id)
        pending = next((n for n in notifications if not n.is_read and n.type == "rank"), None)
        if pending is None:
            return None

        await self.mark_as_read(user_id, pending.id)
        return Banner(
            id=pending.id,
            title=pending.title,
            message=pending.message,
            type="rank",
            duration_ms=RANK_BANNER_DURATION_MS,
        )
