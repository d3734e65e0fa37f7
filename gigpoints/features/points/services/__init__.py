from .daily_login_service import DailyLoginBonusGate  # noqa: F401
from .errors import (  # noqa: F401
    ActivityLogError,
    ConcurrentModificationError,
    FetchError,
    PointsError,
    PointsValidationError,
    UpdateError,
)
from .ledger_service import PointsLedger  # noqa: F401
from .query_service import PointsQueryService  # noqa: F401
