"""CoinGecko-style simple price client."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, cast

import structlog

from pets_tracker.exceptions import TransientNetworkError

if TYPE_CHECKING:
    from pets_tracker.clients.http import AsyncHttpClient
    from pets_tracker.config import Settings


class CoinGeckoClient:
    """Client for GET /simple/price (price by asset id)."""

    def __init__(
        self,
        http_client: AsyncHttpClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _base(self) -> str:
        return self._settings.price.base_url.rstrip("/")

    async def get_prices(self, asset_ids: Iterable[str]) -> dict[str, Decimal]:
        """Return {asset_id: price} in the configured vs currency.

        Assets missing from the response are omitted.

        Raises:
            RateLimited, TransientNetworkError: On upstream failure or an unusable body.
        """
        ids = sorted({a.strip() for a in asset_ids if a and a.strip()})
        if not ids:
            return {}
        vs = self._settings.price.vs_currency
        url = f"{self._base()}/simple/price"
        data = await self._http.get(url, params={"ids": ",".join(ids), "vs_currencies": vs})
        if not isinstance(data, dict):
            raise TransientNetworkError(
                f"Unexpected price response type: {type(data).__name__}", url=url
            )
        prices: dict[str, Decimal] = {}
        for asset in ids:
            entry = cast(dict[str, Any], data).get(asset)
            if not isinstance(entry, dict):
                continue
            raw = cast(dict[str, Any], entry).get(vs)
            if raw is None:
                continue
            try:
                prices[asset] = Decimal(str(raw))
            except InvalidOperation:
                continue
        self._logger.debug(
            "coingecko_prices",
            requested_count=len(ids),
            resolved_count=len(prices),
        )
        return prices
