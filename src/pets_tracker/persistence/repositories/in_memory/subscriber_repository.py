# -*- coding: utf-8 -*-
"""In-memory subscriber registry (set of channel ids)."""

from __future__ import annotations

import asyncio

from pets_tracker.persistence.repositories.interfaces.subscriber_repository import (
    ISubscriberRepository,
)


def _key(channel_id: str | int) -> str:
    """Normalize channel id for storage (Telegram chat ids arrive as int)."""
    return str(channel_id).strip()


class InMemorySubscriberRepository(ISubscriberRepository):
    """In-memory implementation of ISubscriberRepository."""

    def __init__(self, initial: list[str] | None = None) -> None:
        """Initialize the registry, optionally pre-seeded with channel ids."""
        self._store: set[str] = {_key(c) for c in (initial or []) if _key(c)}
        self._lock = asyncio.Lock()

    async def add(self, channel_id: str) -> bool:
        k = _key(channel_id)
        if not k:
            raise ValueError("channel_id must be non-empty")
        async with self._lock:
            if k in self._store:
                return False
            self._store.add(k)
            return True

    async def remove(self, channel_id: str) -> bool:
        k = _key(channel_id)
        async with self._lock:
            if k not in self._store:
                return False
            self._store.discard(k)
            return True

    async def contains(self, channel_id: str) -> bool:
        return _key(channel_id) in self._store

    async def snapshot(self) -> frozenset[str]:
        async with self._lock:
            return frozenset(self._store)

    def count(self) -> int:
        return len(self._store)
