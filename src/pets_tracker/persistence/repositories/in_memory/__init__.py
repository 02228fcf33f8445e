"""In-memory repository implementations."""

from pets_tracker.persistence.repositories.in_memory.subscriber_repository import (
    InMemorySubscriberRepository,
)
from pets_tracker.persistence.repositories.in_memory.trade_history_repository import (
    InMemoryTradeHistoryRepository,
)

__all__ = [
    "InMemorySubscriberRepository",
    "InMemoryTradeHistoryRepository",
]
