"""
Persistence for the `notifications` table.
"""

from gigpoints.db.helpers import DatabaseError, execute_query, fetch_all, fetch_one, fetch_val
from gigpoints.features.notifications.domain import Notification, display_type
from gigpoints.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class NotificationRepositoryError(DatabaseError):
    """More specific exception for repository failures."""


class NotificationRepository:
    COLUMNS = "id, user_id, title, message, type, created_at, is_read"

    @staticmethod
    def _row_to_notification(row: dict) -> Notification:
        return Notification(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            title=row["title"],
            message=row["message"],
            type=display_type(row.get("type")),
            created_at=row["created_at"],
            is_read=bool(row["is_read"]),
        )

    async def list_for_user(self, user_id: str, limit: int = 50) -> list[Notification]:
        query = f"""
            SELECT {self.COLUMNS}
            FROM notifications
            WHERE user_id = %s
            ORDER BY created_at DESC
            LIMIT %s
        """
        rows = await fetch_all(query, (user_id, limit))
        return [self._row_to_notification(row) for row in rows]

    async def count_unread(self, user_id: str) -> int:
        query = "SELECT COUNT(*) FROM notifications WHERE user_id = %s AND is_read = false"
        return int(await fetch_val(query, (user_id,)) or 0)

    async def mark_read(self, user_id: str, notification_id: str) -> bool:
        affected = await execute_query(
            "UPDATE notifications SET is_read = true WHERE id = %s AND user_id = %s",
            (notification_id, user_id),
        )
        return affected > 0

    async def mark_all_read(self, user_id: str) -> int:
        return await execute_query(
            "UPDATE notifications SET is_read = true WHERE user_id = %s AND is_read = false",
            (user_id,),
        )

    async def delete(self, user_id: str, notification_id: str) -> bool:
        affected = await execute_query(
            "DELETE FROM notifications WHERE id = %s AND user_id = %s",
            (notification_id, user_id),
        )
        return affected > 0

    async def insert(
        self, user_id: str, title: str, message: str, stored_type: str
    ) -> Notification:
        query = f"""
            INSERT INTO notifications (user_id, title, message, type, is_read)
            VALUES (%s, %s, %s, %s, false)
            RETURNING {self.COLUMNS}
        """
        row = await fetch_one(query, (user_id, title, message, stored_type))
        if not row:
            raise NotificationRepositoryError("Failed to insert notification", operation="insert")
        logger.info("Notification created", user_id=user_id, type=stored_type)
        return self._row_to_notification(row)
