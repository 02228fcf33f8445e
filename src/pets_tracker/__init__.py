"""PETS buy tracker: chain polling, trade classification and Telegram alerts."""

from pets_tracker.config import get_settings
from pets_tracker.DI import Container
from pets_tracker.services import PollScheduler, PollingRunner

__version__ = "0.1.0"
__all__ = [
    "Container",
    "PollScheduler",
    "PollingRunner",
    "get_settings",
]
