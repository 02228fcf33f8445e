"""Abstract interface for the subscriber registry (channels that receive alerts)."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ISubscriberRepository(ABC):
    """Set of channel ids. Mutated by bot commands; the pipeline only reads snapshots."""

    @abstractmethod
    async def add(self, channel_id: str) -> bool:
        """Subscribe a channel. Return True if it was not subscribed before."""
        ...

    @abstractmethod
    async def remove(self, channel_id: str) -> bool:
        """Unsubscribe a channel. Return True if it was subscribed."""
        ...

    @abstractmethod
    async def contains(self, channel_id: str) -> bool:
        """Return True if the channel is subscribed."""
        ...

    @abstractmethod
    async def snapshot(self) -> frozenset[str]:
        """Return an immutable copy of the current subscribers."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Number of subscribed channels."""
        ...
