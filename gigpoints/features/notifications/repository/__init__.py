from .notification_repository import (  # noqa: F401
    NotificationRepository,
    NotificationRepositoryError,
)
