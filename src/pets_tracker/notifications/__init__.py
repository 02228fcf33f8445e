"""Alert rendering and delivery to subscribed channels."""

from pets_tracker.notifications.dispatcher import NotificationDispatcher
from pets_tracker.notifications.fanout import NotificationFanout
from pets_tracker.notifications.media import MediaCatalog
from pets_tracker.notifications.strategies import (
    BaseNotificationStrategy,
    ConsoleNotifier,
    TelegramNotifier,
)
from pets_tracker.notifications.stylers import (
    VIDEO_UNAVAILABLE_NOTICE,
    TradeNotificationStyler,
)
from pets_tracker.notifications.types import DeliveryStatus, FanoutReport, NotificationStyler

__all__ = [
    "BaseNotificationStrategy",
    "ConsoleNotifier",
    "DeliveryStatus",
    "FanoutReport",
    "MediaCatalog",
    "NotificationDispatcher",
    "NotificationFanout",
    "NotificationStyler",
    "TelegramNotifier",
    "TradeNotificationStyler",
    "VIDEO_UNAVAILABLE_NOTICE",
]
