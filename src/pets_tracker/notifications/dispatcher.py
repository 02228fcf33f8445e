"""Queue between trade recording and subscriber fan-out."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from pets_tracker.models.trade_record import TradeRecord
from pets_tracker.notifications.fanout import NotificationFanout
from pets_tracker.notifications.strategies import BaseNotificationStrategy


@dataclass
class NotificationDispatcher:
    """Accept records without blocking and broadcast them in order from one worker."""

    fanout: NotificationFanout
    sink: BaseNotificationStrategy
    queue_size: int = 500
    get_logger: Callable[[str], Any] = field(default=structlog.get_logger)
    _queue: asyncio.Queue[TradeRecord] | None = field(init=False, default=None)
    _worker_task: asyncio.Task[None] | None = field(init=False, default=None)
    _logger: Any = field(init=False)

    def __post_init__(self) -> None:
        self._logger = self.get_logger("NotificationDispatcher")

    @property
    def is_running(self) -> bool:
        return self._queue is not None

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    async def initialize(self) -> None:
        """Initialize the sink and start the worker."""
        if self._queue is not None:
            return
        await self.sink.initialize()
        self._queue = asyncio.Queue[TradeRecord](maxsize=self.queue_size)
        self._worker_task = asyncio.create_task(self._worker_loop())
        self._logger.debug(
            "notification_init_complete",
            notification_queue_size=self.queue_size,
            notification_worker_started=True,
        )

    async def shutdown(self) -> None:
        """Drain queued records, stop the worker and shut the sink down."""
        self._logger.debug("notification_shutdown_started")
        if self._queue is not None:
            self._queue.shutdown()
            await self._queue.join()
            self._logger.debug("notification_shutdown_queue_drained")
        if self._worker_task is not None:
            await self._worker_task
            self._worker_task = None
        self._queue = None

        await self.sink.shutdown()
        self._logger.debug("notification_shutdown_complete")

    def notify(self, record: TradeRecord) -> bool:
        """Enqueue a record (non-blocking). Returns False when it was dropped."""
        queue = self._queue
        if queue is None:
            raise RuntimeError("NotificationDispatcher not initialized")
        try:
            queue.put_nowait(record)
        except asyncio.QueueFull:
            self._logger.warning(
                "notification_queue_full_dropped",
                transaction_hash=record.transaction_hash,
                chain=record.chain,
            )
            return False
        return True

    async def _worker_loop(self) -> None:
        queue = self._queue
        if queue is None:
            return
        while True:
            try:
                record = await queue.get()
            except asyncio.QueueShutDown:
                self._logger.debug("notification_worker_shutting_down")
                break
            try:
                await self._dispatch(record)
            except Exception:
                self._logger.exception(
                    "notification_dispatch_failed",
                    transaction_hash=record.transaction_hash,
                )
            finally:
                queue.task_done()

    async def _dispatch(self, record: TradeRecord) -> None:
        self._logger.debug(
            "notification_dispatch",
            transaction_hash=record.transaction_hash,
            chain=record.chain,
        )
        await self.fanout.broadcast(record)
