from .router import leaderboard_router, router  # noqa: F401
