"""Notification stylers."""

from pets_tracker.notifications.stylers.trade_styler import (
    VIDEO_UNAVAILABLE_NOTICE,
    TradeNotificationStyler,
)

__all__ = ["TradeNotificationStyler", "VIDEO_UNAVAILABLE_NOTICE"]
