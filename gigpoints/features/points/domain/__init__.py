from .models import (  # noqa: F401
    POINTS_UPDATED_CHANNEL,
    DailyBonusOutcome,
    LastLoginRecord,
    LeaderboardEntry,
    PointsActivity,
    PointsUpdatedEvent,
    PointsUpdateResult,
    ScoreRecord,
)
from .ranks import (  # noqa: F401
    ACTION_REASONS,
    AWARDABLE_ACTIONS,
    DEFAULT_RANK,
    POINTS_VALUES,
    RANKS,
    NextRankProgress,
    PointsAction,
    RankBand,
    next_rank_progress,
    points_for_action,
    rank_for_points,
    rank_position,
    rank_progress_percent,
    validate_rank_table,
)
