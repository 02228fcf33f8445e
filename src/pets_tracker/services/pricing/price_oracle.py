# -*- coding: utf-8 -*-
"""Cached spot prices with a minimum refresh interval and a never-failing read path."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Iterable
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import structlog
from cachetools import TTLCache

from pets_tracker.exceptions import TrackerError
from pets_tracker.models.price_snapshot import PriceSnapshot

if TYPE_CHECKING:
    from pets_tracker.clients.coingecko import CoinGeckoClient

_SNAPSHOT_KEY = "snapshot"


class PriceOracle:
    """Serve PriceSnapshots from a TTL cache; refresh from the price source at most once per interval.

    snapshot() never raises. When the source fails (or returns none of the
    requested assets) the last good prices are served with source="cached", or
    the configured defaults with source="default". The fallback is cached for
    the same interval so a failing source is not hit on every call.
    """

    def __init__(
        self,
        price_client: CoinGeckoClient,
        assets: Iterable[str],
        *,
        refresh_seconds: float = 60.0,
        default_prices: dict[str, Decimal] | None = None,
        timer: Callable[[], float] = time.monotonic,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the oracle.

        Args:
            price_client: Upstream price client (injected).
            assets: Asset ids to request on each refresh.
            refresh_seconds: Minimum interval between upstream requests.
            default_prices: Prices served when nothing good was ever fetched.
            timer: Monotonic clock used by the TTL cache (injected for tests).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._client = price_client
        self._assets = sorted({a.strip() for a in assets if a and a.strip()})
        self._defaults = dict(default_prices or {})
        self._cache: TTLCache[str, PriceSnapshot] = TTLCache(
            maxsize=1, ttl=refresh_seconds, timer=timer
        )
        self._last_good: PriceSnapshot | None = None
        self._lock = asyncio.Lock()
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def assets(self) -> list[str]:
        return list(self._assets)

    async def snapshot(self) -> PriceSnapshot:
        """Return the cached snapshot, refreshing it if the interval has elapsed."""
        cached = self._cache.get(_SNAPSHOT_KEY)
        if cached is not None:
            return cached
        async with self._lock:
            # Another caller may have refreshed while we waited for the lock.
            cached = self._cache.get(_SNAPSHOT_KEY)
            if cached is not None:
                return cached
            snapshot = await self._refresh()
            self._cache[_SNAPSHOT_KEY] = snapshot
            return snapshot

    def invalidate(self) -> None:
        """Drop the cached snapshot so the next call refreshes."""
        self._cache.clear()

    async def _refresh(self) -> PriceSnapshot:
        try:
            prices = await self._client.get_prices(self._assets)
        except TrackerError as e:
            return self._fallback(type(e).__name__, str(e))
        except Exception as e:
            self._logger.exception(
                "price_oracle_unexpected_error",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return self._fallback(type(e).__name__, str(e))

        if self._assets and not prices:
            return self._fallback("EmptyResponse", "no requested asset was priced")

        snapshot = PriceSnapshot(prices=prices, source="live")
        self._last_good = snapshot
        self._logger.debug(
            "price_oracle_refreshed",
            price_assets=sorted(prices),
        )
        return snapshot

    def _fallback(self, error_type: str, error_message: str) -> PriceSnapshot:
        if self._last_good is not None:
            snapshot = PriceSnapshot(
                prices=dict(self._last_good.prices),
                fetched_at=self._last_good.fetched_at,
                source="cached",
            )
        else:
            snapshot = PriceSnapshot(prices=dict(self._defaults), source="default")
        self._logger.warning(
            "price_oracle_stale_snapshot",
            price_source=snapshot.source,
            price_fetched_at=snapshot.fetched_at.isoformat(),
            error_type=error_type,
            error_message=error_message,
        )
        return snapshot
