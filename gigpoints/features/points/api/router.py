"""
points router
-------------
Purpose:
    Endpoints behind the profile screen (rank, progress, history), the
    login flow (daily bonus) and the post/job flows (action awards).

Usage:
    1. GET  /points/me           - Points, rank and progress to next rank
    2. GET  /points/history      - Recent points activity, newest first
    3. POST /points/daily-login  - Claim today's login bonus (idempotent per UTC day)
    4. POST /points/actions      - Award the configured value for an action
    5. GET  /points/ranks        - Rank table
    6. GET  /leaderboard/workers - Workers ordered by points
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from gigpoints.auth.verify import current_user_id
from gigpoints.db.helpers import DatabaseError
from gigpoints.dependencies import get_daily_login_gate, get_points_ledger, get_points_query
from gigpoints.features.points.api.schemas import (
    AwardActionRequest,
    DailyLoginResponse,
    LeaderboardEntryResponse,
    LeaderboardResponse,
    PointsActivityItem,
    PointsHistoryResponse,
    PointsSummaryResponse,
    PointsUpdateResponse,
    RankBandResponse,
)
from gigpoints.features.points.domain import (
    ACTION_REASONS,
    AWARDABLE_ACTIONS,
    RANKS,
    PointsUpdateResult,
    points_for_action,
)
from gigpoints.features.points.services import (
    DailyLoginBonusGate,
    PointsError,
    PointsLedger,
    PointsQueryService,
)
from gigpoints.infrastructure.observability.logging import get_logger
from gigpoints.utils.time_helpers import time_ago, utc_now

router = APIRouter(prefix="/points", tags=["points"])
leaderboard_router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])
logger = get_logger(__name__)


def _to_update_response(result: PointsUpdateResult) -> PointsUpdateResponse:
    return PointsUpdateResponse(
        success=result.success,
        old_points=result.old_points,
        new_points=result.new_points,
        old_rank=result.old_rank,
        new_rank=result.new_rank,
    )


@router.get("/me", response_model=PointsSummaryResponse)
async def get_my_points(
    user_id: str = Depends(current_user_id),
    query: PointsQueryService = Depends(get_points_query),
):
    try:
        summary = await query.summary(user_id)
    except DatabaseError as e:
        logger.error("Error fetching points summary", user_id=user_id, error=str(e))
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "Points unavailable") from e

    if summary is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User profile not found")

    return PointsSummaryResponse(**summary)


@router.get("/history", response_model=PointsHistoryResponse)
async def get_points_history(
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(current_user_id),
    query: PointsQueryService = Depends(get_points_query),
):
    try:
        activities = await query.history(user_id, limit)
    except DatabaseError as e:
        logger.error("Error fetching points history", user_id=user_id, error=str(e))
        raise HTTPException(
            status.HTTP_503_SERVICE_UNAVAILABLE, "Failed to load points history"
        ) from e

    now = utc_now()
    items = [
        PointsActivityItem(
            id=activity.id,
            points=activity.points,
            reason=activity.reason,
            created_at=activity.created_at,
            time_ago=time_ago(activity.created_at, now),
        )
        for activity in activities
    ]
    return PointsHistoryResponse(items=items, count=len(items))


@router.post("/daily-login", response_model=DailyLoginResponse)
async def claim_daily_login(
    user_id: str = Depends(current_user_id),
    gate: DailyLoginBonusGate = Depends(get_daily_login_gate),
):
    """
    Called by the client right after sign-in. Never fails the login:
    problems are reported in `status`.
    """
    outcome = await gate.grant_daily_login_bonus(user_id)

    awarded = 0
    if outcome.granted and outcome.result:
        awarded = outcome.result.new_points - outcome.result.old_points

    return DailyLoginResponse(
        status=outcome.status,
        awarded=awarded,
        last_login_advanced=outcome.last_login_advanced,
        update=_to_update_response(outcome.result) if outcome.result else None,
    )


@router.post("/actions", response_model=PointsUpdateResponse)
async def award_action(
    request: AwardActionRequest,
    user_id: str = Depends(current_user_id),
    ledger: PointsLedger = Depends(get_points_ledger),
):
    if request.action not in AWARDABLE_ACTIONS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{request.action.value} is awarded through POST /points/daily-login",
        )

    result = await ledger.add_points(
        user_id, points_for_action(request.action), ACTION_REASONS[request.action]
    )

    if not result.success:
        error = result.error
        detail = error.to_dict() if isinstance(error, PointsError) else {"message": str(error)}
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)

    return _to_update_response(result)


@router.get("/ranks", response_model=list[RankBandResponse])
async def list_ranks():
    return [
        RankBandResponse(name=band.name, min_points=band.min_points, max_points=band.max_points)
        for band in RANKS
    ]


@leaderboard_router.get("/workers", response_model=LeaderboardResponse)
async def top_workers(
    limit: int = Query(10, ge=1, le=100),
    _user_id: str = Depends(current_user_id),
    query: PointsQueryService = Depends(get_points_query),
):
    try:
        entries = await query.top_workers(limit)
    except DatabaseError as e:
        logger.error("Error fetching top workers", error=str(e))
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "Leaderboard unavailable") from e

    return LeaderboardResponse(
        workers=[
            LeaderboardEntryResponse(
                user_id=entry.user_id,
                full_name=entry.full_name,
                avatar_url=entry.avatar_url,
                points=entry.points,
                rank=entry.rank,
            )
            for entry in entries
        ]
    )
