# -*- coding: utf-8 -*-
"""In-memory trade history: bounded ring of records plus an unbounded seen index."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable
from typing import Any

import structlog

from pets_tracker.models.seen_transaction import SeenTransaction
from pets_tracker.models.trade_record import TradeRecord
from pets_tracker.persistence.repositories.interfaces.trade_history_repository import (
    ITradeHistoryRepository,
)
from pets_tracker.utils.validation import normalize_tx_hash


class InMemoryTradeHistoryRepository(ITradeHistoryRepository):
    """In-memory implementation of ITradeHistoryRepository.

    The ring keeps the last `capacity` records for the status API. The seen index
    is never trimmed, so an evicted hash is still rejected by is_new(). Both chain
    schedulers write here; check-and-insert runs under one lock.
    """

    def __init__(
        self,
        capacity: int = 100,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize an empty store.

        Args:
            capacity: Maximum number of records kept in the history ring.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = capacity
        self._ring: deque[TradeRecord] = deque(maxlen=capacity)
        self._seen: dict[str, SeenTransaction] = {}
        self._lock = asyncio.Lock()
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def capacity(self) -> int:
        return self._capacity

    def seen_count(self) -> int:
        """Number of hashes ever recorded (not bounded by capacity)."""
        return len(self._seen)

    async def is_new(self, transaction_hash: str) -> bool:
        """Return True if the hash has never been recorded."""
        return normalize_tx_hash(transaction_hash) not in self._seen

    async def record(self, record: TradeRecord) -> None:
        """Append a record and mark it seen. Idempotent."""
        await self.record_if_new(record)

    async def record_if_new(self, record: TradeRecord) -> bool:
        """Check-and-insert under the lock. Return True if stored."""
        key = normalize_tx_hash(record.transaction_hash)
        async with self._lock:
            if key in self._seen:
                return False
            evicted = self._ring[0] if len(self._ring) == self._capacity else None
            self._seen[key] = SeenTransaction.create(
                record.chain, key, seen_at=record.discovered_at
            )
            self._ring.append(record)
        if evicted is not None:
            self._logger.debug(
                "trade_history_evicted",
                trade_chain=evicted.chain,
                trade_transaction_hash=evicted.transaction_hash,
                trade_history_capacity=self._capacity,
            )
        return True

    async def recent(self, n: int) -> list[TradeRecord]:
        """Return up to n records, most recent first."""
        if n <= 0:
            return []
        async with self._lock:
            items = list(self._ring)
        items.reverse()
        return items[:n]

    async def latest_by_chain(self, chain: str) -> TradeRecord | None:
        """Return the most recent record of a chain still in the ring."""
        async with self._lock:
            for record in reversed(self._ring):
                if record.chain == chain:
                    return record
        return None

    def count(self) -> int:
        return len(self._ring)
