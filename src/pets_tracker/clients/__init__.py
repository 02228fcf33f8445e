"""HTTP, chain RPC and price clients."""

from pets_tracker.clients.chain_client import TRANSFER_TOPIC, ChainClient
from pets_tracker.clients.coingecko import CoinGeckoClient
from pets_tracker.clients.http import AsyncHttpClient

__all__ = [
    "AsyncHttpClient",
    "ChainClient",
    "CoinGeckoClient",
    "TRANSFER_TOPIC",
]
