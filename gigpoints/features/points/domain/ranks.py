"""
Rank table and score calculator.

These values MUST match the mobile client's rank display and the
`profiles` rank trigger in the database. Everything here is pure.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class RankBand:
    """A contiguous range of point totals sharing one rank name."""

    name: str
    min_points: int
    max_points: int | None  # None = unbounded

    def contains(self, points: int) -> bool:
        if points < self.min_points:
            return False
        return self.max_points is None or points <= self.max_points


@dataclass(frozen=True, slots=True)
class NextRankProgress:
    next_rank: str
    points_needed: int


class PointsAction(str, Enum):
    """Point values awarded per user action."""

    DAILY_LOGIN = "DAILY_LOGIN"
    CREATE_POST = "CREATE_POST"
    RECEIVED_JOB = "RECEIVED_JOB"
    COMPLETED_JOB = "COMPLETED_JOB"
    POSITIVE_REVIEW = "POSITIVE_REVIEW"
    PROFILE_COMPLETION = "PROFILE_COMPLETION"


POINTS_VALUES: dict[PointsAction, int] = {
    PointsAction.DAILY_LOGIN: 10,
    PointsAction.CREATE_POST: 25,
    PointsAction.RECEIVED_JOB: 50,
    PointsAction.COMPLETED_JOB: 100,
    PointsAction.POSITIVE_REVIEW: 20,
    PointsAction.PROFILE_COMPLETION: 15,
}

ACTION_REASONS: dict[PointsAction, str] = {
    PointsAction.DAILY_LOGIN: "Daily login",
    PointsAction.CREATE_POST: "Created a new post",
    PointsAction.RECEIVED_JOB: "Received a job",
    PointsAction.COMPLETED_JOB: "Completed a job",
    PointsAction.POSITIVE_REVIEW: "Received a positive review",
    PointsAction.PROFILE_COMPLETION: "Completed profile",
}

# Actions a client may claim through the actions endpoint. DAILY_LOGIN is
# only awarded by the daily login gate.
AWARDABLE_ACTIONS: frozenset[PointsAction] = frozenset(POINTS_VALUES) - {
    PointsAction.DAILY_LOGIN
}

RANKS: tuple[RankBand, ...] = (
    RankBand("Beginner", 0, 99),
    RankBand("Apprentice", 100, 299),
    RankBand("Skilled", 300, 699),
    RankBand("Expert", 700, 1499),
    RankBand("Master", 1500, 2999),
    RankBand("Grandmaster", 3000, None),
)

DEFAULT_RANK = RANKS[0].name


def validate_rank_table(bands: tuple[RankBand, ...] | list[RankBand]) -> None:
    """
    Raise ValueError unless bands cover [0, +inf) with no gaps or overlaps.
    """
    if not bands:
        raise ValueError("Rank table is empty")
    if bands[0].min_points != 0:
        raise ValueError(f"First rank must start at 0, got {bands[0].min_points}")

    for current, following in zip(bands, bands[1:]):
        if current.max_points is None:
            raise ValueError(f"Unbounded rank {current.name!r} must be last")
        if current.max_points < current.min_points:
            raise ValueError(f"Rank {current.name!r} has max below min")
        if following.min_points != current.max_points + 1:
            raise ValueError(
                f"Ranks {current.name!r} and {following.name!r} are not contiguous"
            )

    if bands[-1].max_points is not None:
        raise ValueError(f"Last rank {bands[-1].name!r} must be unbounded")


def points_for_action(action: PointsAction | str) -> int:
    return POINTS_VALUES[PointsAction(action)]


def _band_index(points: int) -> int | None:
    for index, band in enumerate(RANKS):
        if band.contains(points):
            return index
    return None


def rank_position(name: str | None) -> int:
    """Index of the named rank in RANKS, -1 for unknown names."""
    for index, band in enumerate(RANKS):
        if band.name == name:
            return index
    return -1


def rank_for_points(points: int) -> str:
    """Rank name for a point total; totals outside every band map to the lowest rank."""
    index = _band_index(points)
    if index is None:
        return DEFAULT_RANK
    return RANKS[index].name


def next_rank_progress(points: int) -> NextRankProgress:
    """
    Next rank and the points still needed to reach it.

    In the terminal rank there is nothing left to reach: the current
    name is returned with points_needed=0.
    """
    index = _band_index(points)
    if index is None:
        index = 0

    if index == len(RANKS) - 1:
        return NextRankProgress(next_rank=RANKS[index].name, points_needed=0)

    following = RANKS[index + 1]
    return NextRankProgress(next_rank=following.name, points_needed=following.min_points - points)


def rank_progress_percent(points: int) -> float:
    """Progress bar value shown on the profile screen, 0-100."""
    progress = next_rank_progress(points)
    if progress.points_needed == 0:
        return 100.0
    if points <= 0:
        return 0.0
    return min(100.0, points / (points + progress.points_needed) * 100)


validate_rank_table(RANKS)
