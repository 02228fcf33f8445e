"""Repository interfaces."""

from pets_tracker.persistence.repositories.interfaces.subscriber_repository import (
    ISubscriberRepository,
)
from pets_tracker.persistence.repositories.interfaces.trade_history_repository import (
    ITradeHistoryRepository,
)

__all__ = [
    "ISubscriberRepository",
    "ITradeHistoryRepository",
]
