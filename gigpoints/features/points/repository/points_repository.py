"""
Persistence layer for the points feature.

`PointsStore` is the boundary the ledger and the daily bonus gate depend
on. `PostgresPointsStore` implements it against the Supabase `profiles`
and `points_activity` tables. Every method is a single statement; no
cross-statement transaction is assumed by the callers.
"""

from datetime import datetime
from typing import Protocol

from gigpoints.db.helpers import (
    DatabaseError,
    execute_query,
    fetch_all,
    fetch_one,
    with_db_retry,
)
from gigpoints.features.points.domain import (
    DEFAULT_RANK,
    LastLoginRecord,
    LeaderboardEntry,
    PointsActivity,
    ScoreRecord,
)
from gigpoints.infrastructure.observability.logging import get_logger
from gigpoints.utils.time_helpers import utc_date

logger = get_logger(__name__)


class PointsRepositoryError(DatabaseError):
    """More specific exception for repository failures."""


class PointsStore(Protocol):
    supports_atomic_increment: bool

    async def fetch_score(self, user_id: str) -> ScoreRecord | None: ...

    async def increment_points(self, user_id: str, delta: int) -> ScoreRecord | None: ...

    async def compare_and_set_points(
        self, user_id: str, expected: int, new_points: int
    ) -> ScoreRecord | None: ...

    async def insert_activity(
        self, user_id: str, delta: int, reason: str, created_at: datetime
    ) -> PointsActivity: ...

    async def list_activity(self, user_id: str, limit: int = 10) -> list[PointsActivity]: ...

    async def fetch_last_login(self, user_id: str) -> LastLoginRecord | None: ...

    async def claim_daily_login(self, user_id: str, at: datetime) -> bool: ...

    async def restore_last_login(
        self, user_id: str, claimed_at: datetime, previous: datetime | None
    ) -> bool: ...

    async def list_top_profiles(
        self, limit: int = 10, workers_only: bool = True
    ) -> list[LeaderboardEntry]: ...


def _row_to_score(row: dict | None) -> ScoreRecord | None:
    if not row:
        return None
    return ScoreRecord(user_id=str(row["id"]), points=row["points"] or 0, rank=row["rank"])


def _row_to_activity(row: dict) -> PointsActivity:
    return PointsActivity(
        id=str(row["id"]) if row.get("id") is not None else None,
        user_id=str(row["user_id"]),
        points=row["points"],
        reason=row["reason"],
        created_at=row["created_at"],
    )


class PostgresPointsStore:
    """psycopg-backed PointsStore."""

    supports_atomic_increment = True

    SCORE_COLUMNS = "id, COALESCE(points, 0) AS points, rank"
    ACTIVITY_COLUMNS = "id, user_id, points, reason, created_at"

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def fetch_score(self, user_id: str) -> ScoreRecord | None:
        query = f"SELECT {self.SCORE_COLUMNS} FROM profiles WHERE id = %s"
        return _row_to_score(await fetch_one(query, (user_id,)))

    async def increment_points(self, user_id: str, delta: int) -> ScoreRecord | None:
        """
        Atomically add delta; the rank returned is whatever the profiles
        trigger assigned for the new total.
        """
        query = f"""
            UPDATE profiles
            SET points = COALESCE(points, 0) + %s
            WHERE id = %s
            RETURNING {self.SCORE_COLUMNS}
        """
        return _row_to_score(await fetch_one(query, (delta, user_id)))

    async def compare_and_set_points(
        self, user_id: str, expected: int, new_points: int
    ) -> ScoreRecord | None:
        query = f"""
            UPDATE profiles
            SET points = %s
            WHERE id = %s AND COALESCE(points, 0) = %s
            RETURNING {self.SCORE_COLUMNS}
        """
        return _row_to_score(await fetch_one(query, (new_points, user_id, expected)))

    async def insert_activity(
        self, user_id: str, delta: int, reason: str, created_at: datetime
    ) -> PointsActivity:
        query = f"""
            INSERT INTO points_activity (user_id, points, reason, created_at)
            VALUES (%s, %s, %s, %s)
            RETURNING {self.ACTIVITY_COLUMNS}
        """
        row = await fetch_one(query, (user_id, delta, reason, created_at))
        if not row:
            raise PointsRepositoryError(
                "Failed to insert points activity", operation="insert_activity"
            )
        return _row_to_activity(row)

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def list_activity(self, user_id: str, limit: int = 10) -> list[PointsActivity]:
        query = f"""
            SELECT {self.ACTIVITY_COLUMNS}
            FROM points_activity
            WHERE user_id = %s
            ORDER BY created_at DESC
            LIMIT %s
        """
        rows = await fetch_all(query, (user_id, limit))
        return [_row_to_activity(row) for row in rows]

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def fetch_last_login(self, user_id: str) -> LastLoginRecord | None:
        query = "SELECT id, last_login_date FROM profiles WHERE id = %s"
        row = await fetch_one(query, (user_id,))
        if not row:
            return None
        return LastLoginRecord(user_id=str(row["id"]), last_login_date=row["last_login_date"])

    async def claim_daily_login(self, user_id: str, at: datetime) -> bool:
        """
        Set last_login_date = at unless it already falls on at's UTC day.

        Check and write are one statement, so of two overlapping claims for
        the same day exactly one returns True.
        """
        query = """
            UPDATE profiles
            SET last_login_date = %s
            WHERE id = %s
              AND (last_login_date IS NULL
                   OR (last_login_date AT TIME ZONE 'UTC')::date < %s)
            RETURNING id
        """
        row = await fetch_one(query, (at, user_id, utc_date(at)))
        return row is not None

    async def restore_last_login(
        self, user_id: str, claimed_at: datetime, previous: datetime | None
    ) -> bool:
        """Put back the previous last_login_date if the claim is still in place."""
        affected = await execute_query(
            """
            UPDATE profiles
            SET last_login_date = %s
            WHERE id = %s AND last_login_date = %s
            """,
            (previous, user_id, claimed_at),
        )
        return affected > 0

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def list_top_profiles(
        self, limit: int = 10, workers_only: bool = True
    ) -> list[LeaderboardEntry]:
        where = "WHERE is_worker = true" if workers_only else ""
        query = f"""
            SELECT id, full_name, avatar_url, COALESCE(points, 0) AS points, rank
            FROM profiles
            {where}
            ORDER BY points DESC NULLS LAST
            LIMIT %s
        """
        rows = await fetch_all(query, (limit,))
        return [
            LeaderboardEntry(
                user_id=str(row["id"]),
                full_name=row.get("full_name"),
                avatar_url=row.get("avatar_url"),
                points=row["points"],
                rank=row.get("rank") or DEFAULT_RANK,
            )
            for row in rows
        ]
