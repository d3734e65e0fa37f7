from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from gigpoints.features.points.domain import PointsAction


class PointsSummaryResponse(BaseModel):
    """Response for GET /points/me"""

    user_id: str
    points: int
    rank: str
    next_rank: str
    points_needed: int = Field(..., ge=0)
    progress_percent: float


class PointsActivityItem(BaseModel):
    id: str | None
    points: int
    reason: str
    created_at: datetime
    time_ago: str


class PointsHistoryResponse(BaseModel):
    """Response for GET /points/history"""

    items: list[PointsActivityItem]
    count: int


class AwardActionRequest(BaseModel):
    """Body for POST /points/actions"""

    action: PointsAction


class PointsUpdateResponse(BaseModel):
    success: bool
    old_points: int | None = None
    new_points: int | None = None
    old_rank: str | None = None
    new_rank: str | None = None


class DailyLoginResponse(BaseModel):
    """Response for POST /points/daily-login"""

    status: Literal["granted", "already_claimed", "failed", "error"]
    awarded: int
    last_login_advanced: bool
    update: PointsUpdateResponse | None = None


class RankBandResponse(BaseModel):
    name: str
    min_points: int
    max_points: int | None


class LeaderboardEntryResponse(BaseModel):
    user_id: str
    full_name: str | None
    avatar_url: str | None
    points: int
    rank: str


class LeaderboardResponse(BaseModel):
    """Response for GET /leaderboard/workers"""

    workers: list[LeaderboardEntryResponse]
