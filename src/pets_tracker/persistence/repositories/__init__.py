"""Repositories (interfaces and in-memory implementations)."""

from pets_tracker.persistence.repositories.in_memory import (
    InMemorySubscriberRepository,
    InMemoryTradeHistoryRepository,
)
from pets_tracker.persistence.repositories.interfaces import (
    ISubscriberRepository,
    ITradeHistoryRepository,
)

__all__ = [
    "ISubscriberRepository",
    "ITradeHistoryRepository",
    "InMemorySubscriberRepository",
    "InMemoryTradeHistoryRepository",
]
