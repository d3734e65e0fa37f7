from .models import (  # noqa: F401
    DEFAULT_BANNER_DURATION_MS,
    RANK_BANNER_DURATION_MS,
    RANK_CHANGE_TYPE,
    Banner,
    Notification,
    NotificationType,
    display_type,
)
