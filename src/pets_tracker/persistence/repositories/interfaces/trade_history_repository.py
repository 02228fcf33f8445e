"""Abstract interface for the trade history / dedup store."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pets_tracker.models.trade_record import TradeRecord


class ITradeHistoryRepository(ABC):
    """Bounded history of TradeRecords plus the index of transaction hashes already recorded."""

    @abstractmethod
    async def is_new(self, transaction_hash: str) -> bool:
        """Return True if no TradeRecord exists (or existed) for this hash."""
        ...

    @abstractmethod
    async def record(self, record: TradeRecord) -> None:
        """Append a record and mark its hash seen. No-op for a hash already seen."""
        ...

    @abstractmethod
    async def record_if_new(self, record: TradeRecord) -> bool:
        """Atomically check-and-insert. Return True if the record was stored."""
        ...

    @abstractmethod
    async def recent(self, n: int) -> list[TradeRecord]:
        """Return up to n records, most recent first."""
        ...

    @abstractmethod
    async def latest_by_chain(self, chain: str) -> TradeRecord | None:
        """Return the most recent record for a chain, if any is still in the history."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Number of records currently held in the history."""
        ...
