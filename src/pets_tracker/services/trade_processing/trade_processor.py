"""Per-event pipeline step: dedup, classify, record, hand off to notifications."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from pets_tracker.services.trade_classification import Rejected
from pets_tracker.utils.validation import mask_address

if TYPE_CHECKING:
    from pets_tracker.models import PriceSnapshot, TradeRecord, TransferEvent
    from pets_tracker.persistence.repositories import ITradeHistoryRepository
    from pets_tracker.services.trade_classification import TradeClassifier


class TradeNotifier(Protocol):
    def notify(self, record: TradeRecord) -> bool: ...


class TradeProcessorService:
    """Turn a TransferEvent into at most one recorded and announced TradeRecord."""

    def __init__(
        self,
        classifier: TradeClassifier,
        history: ITradeHistoryRepository,
        notifier: TradeNotifier,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the processor.

        Args:
            classifier: Chain-specific TradeClassifier.
            history: Shared trade history; decides whether a hash is new.
            notifier: Receives every newly recorded TradeRecord (NotificationDispatcher).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._classifier = classifier
        self._history = history
        self._notifier = notifier
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def process(self, event: TransferEvent, snapshot: PriceSnapshot) -> TradeRecord | None:
        """Process one event. Returns the new TradeRecord, or None when skipped.

        Raises:
            TransientNetworkError: Classification needed an upstream that failed.
        """
        if not await self._history.is_new(event.transaction_hash):
            self._logger.debug(
                "trade_duplicate_skipped",
                chain=event.chain,
                transaction_hash=event.transaction_hash,
            )
            return None

        outcome = await self._classifier.evaluate(event, snapshot)
        if isinstance(outcome, Rejected):
            return None

        # Another chain task may have recorded the same hash while we classified.
        if not await self._history.record_if_new(outcome):
            self._logger.debug(
                "trade_duplicate_skipped",
                chain=event.chain,
                transaction_hash=event.transaction_hash,
            )
            return None

        self._logger.info(
            "trade_recorded",
            chain=outcome.chain,
            transaction_hash=outcome.transaction_hash,
            block_number=outcome.block_number,
            token_amount=str(outcome.token_amount),
            category=outcome.category.value,
            fiat_value=str(outcome.fiat_value) if outcome.fiat_value is not None else None,
            recipient_masked=mask_address(outcome.recipient),
            price_source=snapshot.source,
        )
        self._notifier.notify(outcome)
        return outcome
