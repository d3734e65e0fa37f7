"""
Repository tests: SQL helpers are mocked, row mapping and error paths are real.
"""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import psycopg
import pytest

from gigpoints.db import helpers
from gigpoints.db.helpers import DatabaseError
from gigpoints.features.notifications.repository import (
    NotificationRepository,
    NotificationRepositoryError,
)
from gigpoints.features.points.repository import PointsRepositoryError, PostgresPointsStore

POINTS_REPO = "gigpoints.features.points.repository.points_repository"
NOTIFICATION_REPO = "gigpoints.features.notifications.repository.notification_repository"
CREATED = datetime(2024, 5, 17, 12, 0, tzinfo=UTC)


def _transient_error() -> DatabaseError:
    try:
        raise DatabaseError("Query failed", operation="fetch_one") from psycopg.OperationalError(
            "server closed the connection unexpectedly"
        )
    except DatabaseError as e:
        return e


@pytest.mark.asyncio
async def test_fetch_score_maps_row(monkeypatch):
    fetch_one_mock = AsyncMock(return_value={"id": "user-1", "points": 120, "rank": "Apprentice"})
    monkeypatch.setattr(f"{POINTS_REPO}.fetch_one", fetch_one_mock)

    score = await PostgresPointsStore().fetch_score("user-1")

    assert score.points == 120
    assert score.rank == "Apprentice"
    assert fetch_one_mock.await_args.args[1] == ("user-1",)


@pytest.mark.asyncio
async def test_fetch_score_missing_profile(monkeypatch):
    monkeypatch.setattr(f"{POINTS_REPO}.fetch_one", AsyncMock(return_value=None))

    assert await PostgresPointsStore().fetch_score("ghost") is None


@pytest.mark.asyncio
async def test_increment_points_is_single_atomic_update(monkeypatch):
    fetch_one_mock = AsyncMock(return_value={"id": "user-1", "points": 35, "rank": "Beginner"})
    monkeypatch.setattr(f"{POINTS_REPO}.fetch_one", fetch_one_mock)

    score = await PostgresPointsStore().increment_points("user-1", 25)

    query, params = fetch_one_mock.await_args.args
    assert "COALESCE(points, 0) + %s" in query
    assert "RETURNING" in query
    assert params == (25, "user-1")
    assert score.points == 35


@pytest.mark.asyncio
async def test_compare_and_set_conflict_returns_none(monkeypatch):
    fetch_one_mock = AsyncMock(return_value=None)
    monkeypatch.setattr(f"{POINTS_REPO}.fetch_one", fetch_one_mock)

    result = await PostgresPointsStore().compare_and_set_points("user-1", 10, 35)

    assert result is None
    assert fetch_one_mock.await_args.args[1] == (35, "user-1", 10)


@pytest.mark.asyncio
async def test_insert_activity_without_row_raises(monkeypatch):
    monkeypatch.setattr(f"{POINTS_REPO}.fetch_one", AsyncMock(return_value=None))

    with pytest.raises(PointsRepositoryError):
        await PostgresPointsStore().insert_activity("user-1", 10, "Daily login", CREATED)


@pytest.mark.asyncio
async def test_claim_daily_login_is_one_conditional_update(monkeypatch):
    fetch_one_mock = AsyncMock(return_value={"id": "user-1"})
    monkeypatch.setattr(f"{POINTS_REPO}.fetch_one", fetch_one_mock)

    claimed = await PostgresPointsStore().claim_daily_login("user-1", CREATED)

    query, params = fetch_one_mock.await_args.args
    assert "last_login_date IS NULL" in query
    assert "AT TIME ZONE 'UTC'" in query
    assert "RETURNING" in query
    assert params == (CREATED, "user-1", date(2024, 5, 17))
    assert claimed is True


@pytest.mark.asyncio
async def test_claim_daily_login_already_claimed(monkeypatch):
    monkeypatch.setattr(f"{POINTS_REPO}.fetch_one", AsyncMock(return_value=None))

    assert await PostgresPointsStore().claim_daily_login("user-1", CREATED) is False


@pytest.mark.asyncio
async def test_restore_last_login_only_replaces_own_claim(monkeypatch):
    execute_mock = AsyncMock(return_value=0)
    monkeypatch.setattr(f"{POINTS_REPO}.execute_query", execute_mock)
    previous = datetime(2024, 5, 16, 9, 0, tzinfo=UTC)

    restored = await PostgresPointsStore().restore_last_login("user-1", CREATED, previous)

    query, params = execute_mock.await_args.args
    assert "last_login_date = %s" in query.split("WHERE")[1]
    assert params == (previous, "user-1", CREATED)
    assert restored is False


@pytest.mark.asyncio
async def test_reads_retry_transient_failures(monkeypatch):
    fetch_all_mock = AsyncMock(
        side_effect=[
            _transient_error(),
            [
                {
                    "id": 7,
                    "user_id": "user-1",
                    "points": 10,
                    "reason": "Daily login",
                    "created_at": CREATED,
                }
            ],
        ]
    )
    monkeypatch.setattr(f"{POINTS_REPO}.fetch_all", fetch_all_mock)

    activity = await PostgresPointsStore().list_activity("user-1", limit=5)

    assert fetch_all_mock.await_count == 2
    assert activity[0].id == "7"
    assert activity[0].reason == "Daily login"


@pytest.mark.asyncio
async def test_reads_do_not_retry_query_errors(monkeypatch):
    fetch_one_mock = AsyncMock(side_effect=DatabaseError("syntax error", operation="fetch_one"))
    monkeypatch.setattr(f"{POINTS_REPO}.fetch_one", fetch_one_mock)

    with pytest.raises(DatabaseError):
        await PostgresPointsStore().fetch_last_login("user-1")

    assert fetch_one_mock.await_count == 1


@pytest.mark.asyncio
async def test_leaderboard_filters_workers_and_defaults_rank(monkeypatch):
    fetch_all_mock = AsyncMock(
        return_value=[
            {"id": "user-2", "full_name": "Ben", "avatar_url": None, "points": 900, "rank": None}
        ]
    )
    monkeypatch.setattr(f"{POINTS_REPO}.fetch_all", fetch_all_mock)

    entries = await PostgresPointsStore().list_top_profiles(limit=3)

    query, params = fetch_all_mock.await_args.args
    assert "is_worker = true" in query
    assert params == (3,)
    assert entries[0].rank == "Beginner"


@pytest.mark.asyncio
async def test_notification_rows_map_to_display_types(monkeypatch):
    monkeypatch.setattr(
        f"{NOTIFICATION_REPO}.fetch_all",
        AsyncMock(
            return_value=[
                {
                    "id": 1,
                    "user_id": "user-1",
                    "title": "Rank up!",
                    "message": "You have reached the Skilled rank",
                    "type": "rank_change",
                    "created_at": CREATED,
                    "is_read": False,
                }
            ]
        ),
    )

    notifications = await NotificationRepository().list_for_user("user-1")

    assert notifications[0].id == "1"
    assert notifications[0].type == "rank"


@pytest.mark.asyncio
async def test_notification_mark_read_scoped_to_owner(monkeypatch):
    execute_mock = AsyncMock(return_value=0)
    monkeypatch.setattr(f"{NOTIFICATION_REPO}.execute_query", execute_mock)

    assert await NotificationRepository().mark_read("user-1", "n-9") is False
    assert execute_mock.await_args.args[1] == ("n-9", "user-1")


@pytest.mark.asyncio
async def test_notification_insert_without_row_raises(monkeypatch):
    monkeypatch.setattr(f"{NOTIFICATION_REPO}.fetch_one", AsyncMock(return_value=None))

    with pytest.raises(NotificationRepositoryError):
        await NotificationRepository().insert("user-1", "t", "m", "rank_change")


class _FakeCursor:
    def __init__(self, rows=(), rowcount=0, error=None):
        self.rows = list(rows)
        self.rowcount = rowcount
        self.error = error
        self.executed = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, query, params):
        if self.error:
            raise self.error
        self.executed.append((query, params))
        return self

    async def fetchone(self):
        return self.rows[0] if self.rows else None

    async def fetchall(self):
        return self.rows


class _FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def cursor(self):
        return self._cursor

    async def execute(self, query, params):
        return await self._cursor.execute(query, params)


@pytest.mark.asyncio
async def test_helpers_run_on_pool_connection(monkeypatch):
    cursor = _FakeCursor(rows=[{"count": 3}], rowcount=2)
    monkeypatch.setattr(
        "gigpoints.db.helpers.get_db_connection", AsyncMock(return_value=_FakeConnection(cursor))
    )

    assert await helpers.fetch_val("SELECT COUNT(*) AS count FROM notifications") == 3
    assert await helpers.execute_query("UPDATE profiles SET points = 0 WHERE id = %s", ("u",)) == 2
    assert cursor.executed[-1][1] == ("u",)


@pytest.mark.asyncio
async def test_helpers_wrap_driver_errors(monkeypatch):
    cursor = _FakeCursor(error=psycopg.OperationalError("connection lost"))
    monkeypatch.setattr(
        "gigpoints.db.helpers.get_db_connection", AsyncMock(return_value=_FakeConnection(cursor))
    )

    with pytest.raises(DatabaseError) as exc_info:
        await helpers.fetch_all("SELECT 1")

    assert exc_info.value.operation == "fetch_all"
    assert isinstance(exc_info.value.__cause__, psycopg.OperationalError)
