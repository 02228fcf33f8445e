"""TransferEvent: one ERC-20 Transfer log read from a chain."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TransferEvent:
    """Token movement emitted by the tracked contract. Addresses are lower-cased."""

    chain: str
    """Chain key (e.g. bsc, ethereum)."""
    transaction_hash: str
    from_address: str
    to_address: str
    raw_amount: int
    """Amount in the token's smallest unit (wei-like)."""
    block_number: int
    log_index: int = 0
