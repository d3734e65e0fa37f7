"""
Domain models for the points feature.

Plain dataclasses shared by the repository, the services and the API
layer. Records mirror the `profiles` and `points_activity` rows.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from gigpoints.features.points.domain.ranks import rank_position

POINTS_UPDATED_CHANNEL = "pointsUpdated"


@dataclass(slots=True)
class ScoreRecord:
    """The points/rank columns of a profiles row."""

    user_id: str
    points: int
    rank: str | None


@dataclass(slots=True)
class LastLoginRecord:
    user_id: str
    last_login_date: datetime | None


@dataclass(slots=True)
class PointsActivity:
    """Immutable points_activity row."""

    id: str | None
    user_id: str
    points: int
    reason: str
    created_at: datetime


@dataclass(slots=True)
class LeaderboardEntry:
    user_id: str
    full_name: str | None
    avatar_url: str | None
    points: int
    rank: str


@dataclass(frozen=True, slots=True)
class PointsUpdatedEvent:
    user_id: str
    old_points: int
    new_points: int
    old_rank: str
    new_rank: str

    @property
    def promoted(self) -> bool:
        """True when the new rank sits above the old one in the rank table."""
        return rank_position(self.new_rank) > rank_position(self.old_rank)

    def to_payload(self) -> dict[str, Any]:
        """Wire shape consumed by the profile and home feed subscribers."""
        return {
            "userId": self.user_id,
            "oldPoints": self.old_points,
            "newPoints": self.new_points,
            "oldRank": self.old_rank,
            "newRank": self.new_rank,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PointsUpdatedEvent":
        return cls(
            user_id=payload["userId"],
            old_points=payload["oldPoints"],
            new_points=payload["newPoints"],
            old_rank=payload["oldRank"],
            new_rank=payload["newRank"],
        )


@dataclass(slots=True)
class PointsUpdateResult:
    """Outcome of PointsLedger.add_points; errors are carried, never raised."""

    success: bool
    old_points: int | None = None
    new_points: int | None = None
    old_rank: str | None = None
    new_rank: str | None = None
    error: Exception | None = None

    @classmethod
    def failed(cls, error: Exception) -> "PointsUpdateResult":
        return cls(success=False, error=error)


@dataclass(slots=True)
class DailyBonusOutcome:
    status: Literal["granted", "already_claimed", "failed", "error"]
    result: PointsUpdateResult | None = None
    last_login_advanced: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def granted(self) -> bool:
        return self.status == "granted"
