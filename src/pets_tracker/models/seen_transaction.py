"""SeenTransaction: entry of the dedup index.

Identity is the normalized transaction hash. Entries are never evicted while
the process runs, so a hash yields at most one TradeRecord.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from pets_tracker.utils.validation import normalize_tx_hash


@dataclass(frozen=True, slots=True)
class SeenTransaction:
    """Record that a transaction hash has been turned into a TradeRecord."""

    chain: str
    transaction_hash: str
    """Lower-cased 0x hash."""
    seen_at: datetime

    @classmethod
    def create(
        cls,
        chain: str,
        transaction_hash: str,
        *,
        seen_at: datetime | None = None,
    ) -> SeenTransaction:
        """Create a new SeenTransaction with a normalized hash."""
        tx = normalize_tx_hash(transaction_hash)
        if not chain.strip() or not tx:
            raise ValueError("chain and transaction_hash must be non-empty")
        return cls(
            chain=chain.strip(),
            transaction_hash=tx,
            seen_at=seen_at or datetime.now(UTC),
        )
