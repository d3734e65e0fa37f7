"""
Error taxonomy for points operations.

These are carried inside PointsUpdateResult / DailyBonusOutcome rather
than raised across the public service API.
"""


class PointsError(Exception):
    def __init__(self, message: str, *, user_id: str | None = None, operation: str = "unknown"):
        super().__init__(message)
        self.user_id = user_id
        self.operation = operation

    def to_dict(self) -> dict:
        return {
            "type": type(self).__name__,
            "message": str(self),
            "operation": self.operation,
        }


class PointsValidationError(PointsError):
    """Caller passed an empty user id or reason."""


class FetchError(PointsError):
    """Current score could not be read; nothing was written."""


class UpdateError(PointsError):
    """Points write was rejected after a successful read."""


class ConcurrentModificationError(UpdateError):
    """Conditional write kept losing to concurrent writers."""


class ActivityLogError(PointsError):
    """Activity row could not be appended; the points write still stands."""
