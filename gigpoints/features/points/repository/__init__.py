from .points_repository import (  # noqa: F401
    PointsRepositoryError,
    PointsStore,
    PostgresPointsStore,
)
