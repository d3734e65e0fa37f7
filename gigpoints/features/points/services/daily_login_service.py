"""
Daily login bonus.

A user earns DAILY_LOGIN points on the first login of each UTC calendar
day. `last_login_date` on the profile records the day that was claimed.
The day is claimed with a single conditional write before any points are
added, so overlapping requests cannot both award the bonus.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TypeVar

from gigpoints.features.points.domain import (
    ACTION_REASONS,
    DailyBonusOutcome,
    PointsAction,
    points_for_action,
)
from gigpoints.features.points.repository import PointsStore
from gigpoints.features.points.services.ledger_service import PointsLedger
from gigpoints.infrastructure.observability.logging import get_logger
from gigpoints.utils.time_helpers import utc_date, utc_now

logger = get_logger(__name__)

T = TypeVar("T")


class DailyLoginBonusGate:
    def __init__(
        self,
        store: PointsStore,
        ledger: PointsLedger,
        *,
        clock: Callable[[], datetime] = utc_now,
        timeout_s: float = 10.0,
        advance_on_failure: bool = False,
    ):
        self._store = store
        self._ledger = ledger
        self._clock = clock
        self._timeout_s = timeout_s
        self._advance_on_failure = advance_on_failure

    async def _call(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self._timeout_s)

    async def grant_daily_login_bonus(self, user_id: str) -> DailyBonusOutcome:
        """
        Award the daily login bonus unless today's has already been claimed.

        With advance_on_failure=False a failed award hands the day back, so
        the next login on the same day can try again.
        """
        try:
            record = await self._call(self._store.fetch_last_login(user_id))
        except Exception as e:
            logger.error("Error fetching user data", user_id=user_id, error=str(e))
            return DailyBonusOutcome(status="error", details={"error": str(e)})

        if record is None:
            logger.error("Profile not found for daily login", user_id=user_id)
            return DailyBonusOutcome(status="error", details={"error": "Profile not found"})

        now = self._clock()
        today = utc_date(now)
        details = {"day": str(today)}

        if utc_date(record.last_login_date) == today:
            logger.debug("Daily login bonus already claimed", user_id=user_id, day=str(today))
            return DailyBonusOutcome(status="already_claimed", details=details)

        try:
            claimed = await self._call(self._store.claim_daily_login(user_id, now))
        except Exception as e:
            logger.error("Error claiming daily login", user_id=user_id, error=str(e))
            return DailyBonusOutcome(status="error", details={"error": str(e)})

        if not claimed:
            logger.info("Daily login claimed by a concurrent request", user_id=user_id)
            return DailyBonusOutcome(status="already_claimed", details=details)

        result = await self._ledger.add_points(
            user_id,
            points_for_action(PointsAction.DAILY_LOGIN),
            ACTION_REASONS[PointsAction.DAILY_LOGIN],
        )

        if not result.success:
            advanced = True
            if not self._advance_on_failure:
                advanced = not await self._release_claim(user_id, now, record.last_login_date)
            logger.warning(
                "Daily login bonus not granted",
                user_id=user_id,
                last_login_advanced=advanced,
                error=str(result.error),
            )
            return DailyBonusOutcome(
                status="failed", result=result, last_login_advanced=advanced, details=details
            )

        logger.info(
            "Daily login bonus granted",
            user_id=user_id,
            day=str(today),
            new_points=result.new_points,
        )
        return DailyBonusOutcome(
            status="granted", result=result, last_login_advanced=True, details=details
        )

    async def _release_claim(
        self, user_id: str, claimed_at: datetime, previous: datetime | None
    ) -> bool:
        try:
            return await self._call(self._store.restore_last_login(user_id, claimed_at, previous))
        except Exception as e:
            # The day stays spent until tomorrow.
            logger.error("Error restoring last login date", user_id=user_id, error=str(e))
            return False
