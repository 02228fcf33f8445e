"""Deliver one TradeRecord to every subscribed channel."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Optional

import structlog

from pets_tracker.exceptions import DeliveryError
from pets_tracker.models.trade_record import TradeRecord
from pets_tracker.notifications.strategies import BaseNotificationStrategy
from pets_tracker.notifications.types import DeliveryStatus, FanoutReport, NotificationStyler
from pets_tracker.persistence.repositories import ISubscriberRepository


class NotificationFanout:
    """Concurrent, failure-isolated delivery to a snapshot of subscribers.

    Each channel has its own lock, acquired before the shared semaphore, so
    deliveries to one channel happen in broadcast order while at most
    ``max_concurrency`` deliveries are in flight overall.
    """

    def __init__(
        self,
        subscribers: ISubscriberRepository,
        sink: BaseNotificationStrategy,
        styler: NotificationStyler,
        *,
        max_concurrency: int = 8,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._subscribers = subscribers
        self._sink = sink
        self._styler = styler
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._channel_locks: dict[str, asyncio.Lock] = {}
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def broadcast(self, record: TradeRecord) -> FanoutReport:
        """Send record to all current subscribers. Never raises for delivery failures."""
        channels = sorted(await self._subscribers.snapshot())
        if not channels:
            self._logger.debug(
                "fanout_no_subscribers",
                transaction_hash=record.transaction_hash,
            )
            return FanoutReport(transaction_hash=record.transaction_hash)

        text = self._styler.render_trade(record)
        fallback_text = self._styler.render_trade_fallback(record)
        # Locks are bound here, before any await, so a later broadcast queues behind this one.
        jobs = [
            self._deliver_one(channel, self._lock_for(channel), record, text, fallback_text)
            for channel in channels
        ]
        statuses = await asyncio.gather(*jobs)
        self._prune_locks(set(channels))

        by_status: dict[DeliveryStatus, list[str]] = {status: [] for status in DeliveryStatus}
        for channel, status in zip(channels, statuses):
            by_status[status].append(channel)
        report = FanoutReport(
            transaction_hash=record.transaction_hash,
            delivered=tuple(by_status[DeliveryStatus.DELIVERED]),
            fallback=tuple(by_status[DeliveryStatus.FALLBACK]),
            failed=tuple(by_status[DeliveryStatus.FAILED]),
        )
        if report.partial_failure:
            self._logger.warning(
                "fanout_partial_failure",
                transaction_hash=record.transaction_hash,
                delivered_count=len(report.delivered),
                fallback_count=len(report.fallback),
                failed_count=len(report.failed),
                failed_channels=list(report.failed),
            )
        else:
            self._logger.info(
                "fanout_complete",
                transaction_hash=record.transaction_hash,
                delivered_count=len(report.delivered),
                fallback_count=len(report.fallback),
            )
        return report

    async def _deliver_one(
        self,
        channel_id: str,
        lock: asyncio.Lock,
        record: TradeRecord,
        text: str,
        fallback_text: str,
    ) -> DeliveryStatus:
        async with lock:
            async with self._semaphore:
                media_url = record.media_url or None
                error = await self._try_deliver(channel_id, text, media_url)
                if error is None:
                    return DeliveryStatus.DELIVERED
                if media_url is None:
                    self._log_failure(channel_id, record, error, stage="text")
                    return DeliveryStatus.FAILED

                self._logger.warning(
                    "fanout_media_delivery_failed",
                    channel_id=channel_id,
                    transaction_hash=record.transaction_hash,
                    error_type=type(error).__name__,
                    error_message=str(error),
                )
                fallback_error = await self._try_deliver(channel_id, fallback_text, None)
                if fallback_error is None:
                    return DeliveryStatus.FALLBACK
                self._log_failure(channel_id, record, fallback_error, stage="fallback")
                return DeliveryStatus.FAILED

    async def _try_deliver(
        self, channel_id: str, text: str, media_url: str | None
    ) -> Exception | None:
        try:
            await self._sink.deliver(channel_id, text, media_url)
        except DeliveryError as exc:
            return exc
        except Exception as exc:
            self._logger.exception(
                "fanout_sink_unexpected_error",
                channel_id=channel_id,
                error_type=type(exc).__name__,
            )
            return exc
        return None

    def _log_failure(
        self, channel_id: str, record: TradeRecord, error: Exception, *, stage: str
    ) -> None:
        self._logger.warning(
            "fanout_delivery_failed",
            channel_id=channel_id,
            transaction_hash=record.transaction_hash,
            stage=stage,
            permanent=getattr(error, "permanent", False),
            error_type=type(error).__name__,
            error_message=str(error),
        )

    def _lock_for(self, channel_id: str) -> asyncio.Lock:
        lock = self._channel_locks.get(channel_id)
        if lock is None:
            lock = asyncio.Lock()
            self._channel_locks[channel_id] = lock
        return lock

    def _prune_locks(self, keep: set[str]) -> None:
        for channel_id in list(self._channel_locks):
            lock = self._channel_locks[channel_id]
            if channel_id not in keep and not lock.locked():
                del self._channel_locks[channel_id]
