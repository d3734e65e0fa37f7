from .notification_service import NotificationService  # noqa: F401
from .rank_change_notifier import RankChangeNotifier  # noqa: F401
