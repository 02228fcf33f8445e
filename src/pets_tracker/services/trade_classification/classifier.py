"""TradeClassifier: accept or reject a TransferEvent and build its TradeRecord."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

import structlog

from pets_tracker.exceptions import DataUnavailable
from pets_tracker.models.trade_record import SizeCategory, TradeRecord
from pets_tracker.utils.validation import normalize_address

if TYPE_CHECKING:
    from pets_tracker.config import ChainSettings
    from pets_tracker.models.price_snapshot import PriceSnapshot
    from pets_tracker.models.transfer_event import TransferEvent
    from pets_tracker.notifications.media import MediaCatalog
    from pets_tracker.services.trade_classification.trade_signal import ITradeSignal

CENT = Decimal("0.01")


class RejectionReason(str, Enum):
    NOT_FROM_POOL = "not_from_pool"
    NOT_A_TRADE = "not_a_trade"
    VALUE_UNAVAILABLE = "value_unavailable"


@dataclass(frozen=True, slots=True)
class Rejected:
    """Outcome of evaluate() for a transfer that does not become a TradeRecord."""

    reason: RejectionReason
    detail: str | None = None


class TradeClassifier:
    """Classify pool transfers of one chain.

    A transfer is accepted when it was sent by the chain's pool, the trade
    signal recognises it as a DEX trade and its amount is positive. The fiat
    value is the token amount times the snapshot price of the chain's price
    asset; without a price the record is kept with fiat_value=None.
    """

    def __init__(
        self,
        chain: ChainSettings,
        trade_signal: ITradeSignal,
        media: MediaCatalog,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._chain = chain
        self._pool = normalize_address(chain.pool_address)
        self._signal = trade_signal
        self._media = media
        self._clock = clock
        self._logger = get_logger(logger_name or f"{self.__class__.__name__}.{chain.key}")

    def token_amount(self, raw_amount: int) -> Decimal:
        """Convert a raw on-chain amount to token units."""
        return Decimal(raw_amount).scaleb(-self._chain.token_decimals)

    async def evaluate(
        self, event: TransferEvent, snapshot: PriceSnapshot
    ) -> TradeRecord | Rejected:
        """Return a TradeRecord for an accepted trade, otherwise Rejected.

        Raises:
            TransientNetworkError: The trade signal could not reach its upstream.
        """
        if normalize_address(event.from_address) != self._pool:
            return self._reject(event, RejectionReason.NOT_FROM_POOL)
        if event.raw_amount <= 0:
            return self._reject(
                event, RejectionReason.VALUE_UNAVAILABLE, f"raw amount {event.raw_amount}"
            )

        try:
            is_trade = await self._signal.is_trade(event)
        except DataUnavailable as e:
            return self._reject(event, RejectionReason.VALUE_UNAVAILABLE, str(e))
        if not is_trade:
            return self._reject(event, RejectionReason.NOT_A_TRADE)

        amount = self.token_amount(event.raw_amount)
        category = SizeCategory.for_amount(amount)
        price = snapshot.price_of(self._chain.price_asset)
        fiat_value = (
            (amount * price).quantize(CENT, rounding=ROUND_HALF_UP) if price is not None else None
        )
        if fiat_value is None:
            self._logger.info(
                "trade_fiat_value_unknown",
                chain=self._chain.key,
                transaction_hash=event.transaction_hash,
                price_asset=self._chain.price_asset,
                price_source=snapshot.source,
            )
        return TradeRecord.create(
            chain=event.chain,
            transaction_hash=event.transaction_hash,
            recipient=normalize_address(event.to_address),
            token_amount=amount,
            category=category,
            fiat_value=fiat_value,
            media_url=self._media.url_for(category),
            block_number=event.block_number,
            discovered_at=self._clock(),
        )

    def _reject(
        self, event: TransferEvent, reason: RejectionReason, detail: str | None = None
    ) -> Rejected:
        self._logger.debug(
            "trade_rejected",
            chain=self._chain.key,
            transaction_hash=event.transaction_hash,
            rejection_reason=reason.value,
            rejection_detail=detail,
        )
        return Rejected(reason=reason, detail=detail)
