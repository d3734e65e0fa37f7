"""
Read-side helpers for the profile screen, points history and home feed.
"""

from gigpoints.features.points.domain import (
    DEFAULT_RANK,
    LeaderboardEntry,
    PointsActivity,
    next_rank_progress,
    rank_progress_percent,
)
from gigpoints.features.points.repository import PointsStore
from gigpoints.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class PointsQueryService:
    def __init__(self, store: PointsStore):
        self._store = store

    async def summary(self, user_id: str) -> dict | None:
        """Points, rank and progress towards the next rank, None if no profile."""
        score = await self._store.fetch_score(user_id)
        if score is None:
            return None

        progress = next_rank_progress(score.points)
        return {
            "user_id": user_id,
            "points": score.points,
            "rank": score.rank or DEFAULT_RANK,
            "next_rank": progress.next_rank,
            "points_needed": progress.points_needed,
            "progress_percent": round(rank_progress_percent(score.points), 1),
        }

    async def history(self, user_id: str, limit: int = 10) -> list[PointsActivity]:
        activities = await self._store.list_activity(user_id, limit)
        logger.debug("Points history fetched", user_id=user_id, count=len(activities))
        return activities

    async def top_workers(self, limit: int = 10) -> list[LeaderboardEntry]:
        return await self._store.list_top_profiles(limit=limit, workers_only=True)
