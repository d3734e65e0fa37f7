"""
Points ledger.

`PointsLedger.add_points` applies a delta to a user's point total and fans
the change out:

    read score -> write new total -> append points_activity row
               -> publish "pointsUpdated" on the event bus

The write uses the store's atomic increment when it has one and falls
back to a bounded compare-and-set loop otherwise. Failures before the
write commits come back as `PointsUpdateResult(success=False)`; a failed
activity append is logged and does not undo the update.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TypeVar

from gigpoints.features.points.domain import (
    DEFAULT_RANK,
    POINTS_UPDATED_CHANNEL,
    PointsUpdatedEvent,
    PointsUpdateResult,
    ScoreRecord,
    rank_for_points,
)
from gigpoints.features.points.repository import PointsStore
from gigpoints.features.points.services.errors import (
    ActivityLogError,
    ConcurrentModificationError,
    FetchError,
    PointsValidationError,
    UpdateError,
)
from gigpoints.infrastructure.observability.logging import get_logger, log_points_change
from gigpoints.services.events import EventBus
from gigpoints.utils.time_helpers import utc_now

logger = get_logger(__name__)

T = TypeVar("T")


class PointsLedger:
    def __init__(
        self,
        store: PointsStore,
        event_bus: EventBus,
        *,
        timeout_s: float = 10.0,
        max_retries: int = 3,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._event_bus = event_bus
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._clock = clock

    async def _call(self, awaitable: Awaitable[T]) -> T:
        # Cancelling the caller's task cancels the pending store call too.
        return await asyncio.wait_for(awaitable, timeout=self._timeout_s)

    async def add_points(self, user_id: str, delta: int, reason: str) -> PointsUpdateResult:
        """
        Add delta (any sign, no clamping) to the user's points.

        Args:
            user_id: profiles.id of the user
            delta: Points to apply
            reason: Free text stored on the activity row

        Returns:
            PointsUpdateResult with old/new points and ranks, or the error
        """
        if not user_id or not reason:
            error = PointsValidationError(
                "user_id and reason are required", user_id=user_id, operation="add_points"
            )
            logger.warning("Rejected points update", user_id=user_id, error=str(error))
            return PointsUpdateResult.failed(error)

        # 1. Read
        try:
            current = await self._call(self._store.fetch_score(user_id))
        except Exception as e:
            logger.error("Error fetching profile", user_id=user_id, error=str(e))
            return PointsUpdateResult.failed(
                FetchError(f"Could not read points: {e}", user_id=user_id, operation="fetch_score")
            )

        if current is None:
            logger.error("Profile not found for points update", user_id=user_id)
            return PointsUpdateResult.failed(
                FetchError("Profile not found", user_id=user_id, operation="fetch_score")
            )

        # 2-3. Compute and write
        try:
            base, written = await self._write(user_id, delta, current)
        except UpdateError as e:
            logger.error(
                "Error updating points",
                user_id=user_id,
                delta=delta,
                error=str(e),
                error_type=type(e).__name__,
            )
            return PointsUpdateResult.failed(e)

        old_points = base.points
        old_rank = base.rank or DEFAULT_RANK
        new_points = written.points
        # The store's rank is authoritative; keep the old label if it sent none.
        new_rank = written.rank or old_rank

        # 4. Activity log
        await self._append_activity(user_id, delta, reason)

        # 5. Fan out
        event = PointsUpdatedEvent(
            user_id=user_id,
            old_points=old_points,
            new_points=new_points,
            old_rank=old_rank,
            new_rank=new_rank,
        )
        self._event_bus.publish(POINTS_UPDATED_CHANNEL, event.to_payload())

        log_points_change(user_id, delta, old_points, new_points, old_rank, new_rank, reason)

        return PointsUpdateResult(
            success=True,
            old_points=old_points,
            new_points=new_points,
            old_rank=old_rank,
            new_rank=new_rank,
        )

    async def _write(
        self, user_id: str, delta: int, current: ScoreRecord
    ) -> tuple[ScoreRecord, ScoreRecord]:
        """Persist current.points + delta; returns (base record, written record)."""
        if getattr(self._store, "supports_atomic_increment", False):
            return await self._write_atomic(user_id, delta, current)
        return await self._write_compare_and_set(user_id, delta, current)

    async def _write_atomic(
        self, user_id: str, delta: int, current: ScoreRecord
    ) -> tuple[ScoreRecord, ScoreRecord]:
        try:
            written = await self._call(self._store.increment_points(user_id, delta))
        except Exception as e:
            raise UpdateError(
                f"Points write failed: {e}", user_id=user_id, operation="increment_points"
            ) from e

        if written is None:
            raise UpdateError(
                "Points write matched no profile", user_id=user_id, operation="increment_points"
            )

        base_points = written.points - delta
        if base_points != current.points:
            # Another writer landed between our read and the increment.
            logger.info(
                "Points changed between read and increment",
                user_id=user_id,
                read_points=current.points,
                base_points=base_points,
            )
            current = ScoreRecord(
                user_id=user_id, points=base_points, rank=rank_for_points(base_points)
            )
        return current, written

    async def _write_compare_and_set(
        self, user_id: str, delta: int, current: ScoreRecord
    ) -> tuple[ScoreRecord, ScoreRecord]:
        expected = current
        for attempt in range(self._max_retries + 1):
            try:
                written = await self._call(
                    self._store.compare_and_set_points(
                        user_id, expected.points, expected.points + delta
                    )
                )
            except Exception as e:
                raise UpdateError(
                    f"Points write failed: {e}", user_id=user_id, operation="compare_and_set_points"
                ) from e

            if written is not None:
                return expected, written

            logger.warning(
                "Concurrent points modification, retrying",
                user_id=user_id,
                attempt=attempt + 1,
                max_retries=self._max_retries,
                expected_points=expected.points,
            )

            try:
                reread = await self._call(self._store.fetch_score(user_id))
            except Exception as e:
                raise UpdateError(
                    f"Re-read after conflict failed: {e}", user_id=user_id, operation="fetch_score"
                ) from e
            if reread is None:
                raise UpdateError(
                    "Profile disappeared during update", user_id=user_id, operation="fetch_score"
                )
            expected = reread

        raise ConcurrentModificationError(
            f"Points changed concurrently {self._max_retries + 1} times; delta not applied",
            user_id=user_id,
            operation="compare_and_set_points",
        )

    async def _append_activity(self, user_id: str, delta: int, reason: str) -> None:
        try:
            await self._call(self._store.insert_activity(user_id, delta, reason, self._clock()))
        except Exception as e:
            error = ActivityLogError(str(e), user_id=user_id, operation="insert_activity")
            logger.error(
                "Error logging points activity",
                user_id=user_id,
                delta=delta,
                reason=reason,
                **error.to_dict(),
            )
