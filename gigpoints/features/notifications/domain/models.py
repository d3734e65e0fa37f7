"""
Domain models for in-app notifications.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

NotificationType = Literal["success", "info", "warning", "error", "rank"]

RANK_CHANGE_TYPE = "rank_change"

DEFAULT_BANNER_DURATION_MS = 5000
RANK_BANNER_DURATION_MS = 7000

_STORED_TO_DISPLAY: dict[str, NotificationType] = {
    RANK_CHANGE_TYPE: "rank",
    "error": "error",
    "warning": "warning",
    "success": "success",
}


def display_type(stored_type: str | None) -> NotificationType:
    """Map the notifications.type column to the type the client renders."""
    return _STORED_TO_DISPLAY.get(stored_type or "", "info")


@dataclass(slots=True)
class Notification:
    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    created_at: datetime
    is_read: bool


@dataclass(slots=True)
class Banner:
    """Transient banner shown on top of the current screen."""

    id: str
    title: str
    message: str
    type: NotificationType = "info"
    duration_ms: int = DEFAULT_BANNER_DURATION_MS
