"""Notification sinks."""

from pets_tracker.notifications.strategies.base import (
    BaseNotificationStrategy,
)
from pets_tracker.notifications.strategies.console import ConsoleNotifier
from pets_tracker.notifications.strategies.telegram import TelegramNotifier

__all__ = [
    "BaseNotificationStrategy",
    "ConsoleNotifier",
    "TelegramNotifier",
]
