"""Predicates deciding whether a pool transfer came from a DEX trade."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING

from pets_tracker.exceptions import DataUnavailable

if TYPE_CHECKING:
    from pets_tracker.clients.chain_client import ChainClient
    from pets_tracker.models.transfer_event import TransferEvent


class ITradeSignal(ABC):
    """Decide whether a transfer out of the pool is a DEX trade."""

    @abstractmethod
    async def is_trade(self, event: TransferEvent) -> bool:
        """Return True for a trade.

        Raises:
            DataUnavailable: The signal cannot be evaluated for this event (skip it).
            TransientNetworkError: Upstream failure (retry the batch later).
        """
        ...


class RouterAddressSignal(ITradeSignal):
    """Trade iff the transaction was sent to one of the chain's known DEX routers."""

    def __init__(self, chain_client: ChainClient, router_addresses: Iterable[str]) -> None:
        self._chain_client = chain_client
        self._routers = frozenset(a.strip().lower() for a in router_addresses if a.strip())

    @property
    def router_addresses(self) -> frozenset[str]:
        return self._routers

    async def is_trade(self, event: TransferEvent) -> bool:
        target = await self._chain_client.transaction_target(event.transaction_hash)
        if target is None:
            raise DataUnavailable(
                f"transaction {event.transaction_hash} not found on {event.chain}"
            )
        return target in self._routers


class AlwaysTradeSignal(ITradeSignal):
    """Every transfer out of the pool counts as a trade."""

    async def is_trade(self, event: TransferEvent) -> bool:
        return True


def build_trade_signal(strategy: str, chain_client: ChainClient) -> ITradeSignal:
    """Build the configured signal for a chain ("router" or "always")."""
    if strategy == "always":
        return AlwaysTradeSignal()
    if strategy == "router":
        return RouterAddressSignal(chain_client, chain_client.chain.router_addresses)
    raise ValueError(f"Unknown trade signal strategy: {strategy!r}")
