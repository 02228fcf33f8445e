"""Persistence layer (in-memory repositories; state resets on restart)."""

from pets_tracker.persistence.repositories import (
    ISubscriberRepository,
    ITradeHistoryRepository,
    InMemorySubscriberRepository,
    InMemoryTradeHistoryRepository,
)

__all__ = [
    "ISubscriberRepository",
    "ITradeHistoryRepository",
    "InMemorySubscriberRepository",
    "InMemoryTradeHistoryRepository",
]
