"""Per-chain polling loop: block window -> transfer events -> trade pipeline."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

import structlog
from structlog.contextvars import bound_contextvars

from pets_tracker.exceptions import RateLimited, TrackerError, TransientNetworkError
from pets_tracker.models.chain_watermark import ChainWatermark
from pets_tracker.services.polling.backoff import ExponentialBackoff

if TYPE_CHECKING:
    from pets_tracker.clients.chain_client import ChainClient
    from pets_tracker.config import SchedulerSettings
    from pets_tracker.services.pricing import PriceOracle
    from pets_tracker.services.trade_processing import TradeProcessorService

T = TypeVar("T")


class SchedulerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    SUCCESS = "success"
    FAILED = "failed"


class TickStatus(str, Enum):
    NOOP = "noop"
    """No new blocks since the watermark."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class TickResult:
    status: TickStatus
    watermark: int | None
    from_block: int | None = None
    to_block: int | None = None
    events: int = 0
    recorded: int = 0
    error: str | None = None


class PollScheduler:
    """Poll one chain for pool transfers and feed them to the trade processor.

    The watermark is the next block not yet processed. It is seeded from the
    first height read and advances to ``target + 1`` only after a whole
    window has been processed; a failed tick leaves it untouched so the same
    window is retried.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        price_oracle: PriceOracle,
        processor: TradeProcessorService,
        settings: SchedulerSettings,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            chain_client: JSON-RPC client of the chain to poll (its settings give cadence and window).
            price_oracle: Shared price oracle; one snapshot per tick with events.
            processor: Trade pipeline for this chain.
            settings: Retry budget and backoff bounds (settings.scheduler).
            sleep: Awaitable sleep used between retries (injected for tests).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name + chain key).
        """
        self._client = chain_client
        self._chain = chain_client.chain
        self._oracle = price_oracle
        self._processor = processor
        self._max_attempts = settings.max_attempts
        self._transient_backoff = ExponentialBackoff(
            settings.backoff_floor_seconds, settings.backoff_ceiling_seconds
        )
        self._rate_limit_backoff = ExponentialBackoff(
            settings.rate_limit_floor_seconds, settings.rate_limit_ceiling_seconds
        )
        self._sleep = sleep
        self._watermark: ChainWatermark | None = None
        self._state = SchedulerState.IDLE
        self._last_result: TickResult | None = None
        self._logger = get_logger(logger_name or f"{self.__class__.__name__}.{self._chain.key}")

    @property
    def chain_key(self) -> str:
        return self._chain.key

    @property
    def watermark(self) -> int | None:
        return self._watermark.block if self._watermark is not None else None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def last_result(self) -> TickResult | None:
        return self._last_result

    @property
    def transient_backoff(self) -> ExponentialBackoff:
        return self._transient_backoff

    @property
    def rate_limit_backoff(self) -> ExponentialBackoff:
        return self._rate_limit_backoff

    def reset(self) -> None:
        """Forget the watermark; the next tick seeds it again from the current height."""
        self._logger.info("poll_watermark_reset", previous_watermark=self.watermark)
        self._watermark = None
        self._transient_backoff.reset()
        self._rate_limit_backoff.reset()

    async def tick(self) -> TickResult:
        """Run one polling cycle. Never raises except on cancellation."""
        self._state = SchedulerState.POLLING
        with bound_contextvars(chain=self._chain.key):
            try:
                result = await self._tick()
            except asyncio.CancelledError:
                self._state = SchedulerState.IDLE
                raise
            except Exception as e:
                log = self._logger.warning if isinstance(e, TrackerError) else self._logger.exception
                log(
                    "poll_tick_failed",
                    watermark=self.watermark,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                result = TickResult(
                    status=TickStatus.FAILED,
                    watermark=self.watermark,
                    error=f"{type(e).__name__}: {e}",
                )
        self._state = (
            SchedulerState.FAILED if result.status is TickStatus.FAILED else SchedulerState.SUCCESS
        )
        self._last_result = result
        return result

    async def run(self, shutdown_event: asyncio.Event) -> None:
        """Tick every ``poll_seconds`` until shutdown_event is set."""
        self._logger.info(
            "poll_scheduler_started",
            chain=self._chain.key,
            poll_seconds=self._chain.poll_seconds,
            lookback_blocks=self._chain.lookback_blocks,
            max_blocks_per_poll=self._chain.max_blocks_per_poll,
        )
        try:
            while not shutdown_event.is_set():
                await self.tick()
                self._state = SchedulerState.IDLE
                try:
                    await asyncio.wait_for(shutdown_event.wait(), timeout=self._chain.poll_seconds)
                except TimeoutError:
                    pass
        except asyncio.CancelledError:
            self._logger.info(
                "poll_scheduler_stopped",
                chain=self._chain.key,
                stop_reason="cancelled",
                watermark=self.watermark,
            )
            raise
        self._logger.info(
            "poll_scheduler_stopped",
            chain=self._chain.key,
            stop_reason="shutdown",
            watermark=self.watermark,
        )

    async def _tick(self) -> TickResult:
        height = await self._with_retry("current_height", self._client.current_height)
        if self._watermark is None:
            self._watermark = ChainWatermark.seed(
                self._chain.key, height, self._chain.lookback_blocks
            )
            self._logger.info(
                "poll_watermark_seeded",
                height=height,
                watermark=self._watermark.block,
            )

        from_block = self._watermark.block
        to_block = min(from_block + self._chain.max_blocks_per_poll, height)
        if to_block < from_block:
            self._logger.debug("poll_no_new_blocks", height=height, watermark=from_block)
            self._reset_backoff()
            return TickResult(status=TickStatus.NOOP, watermark=from_block)

        events = await self._with_retry(
            "transfer_events",
            lambda: self._client.transfer_events(from_block, to_block),
        )
        recorded = 0
        if events:
            snapshot = await self._oracle.snapshot()
            for event in events:
                if await self._processor.process(event, snapshot) is not None:
                    recorded += 1

        self._watermark = self._watermark.advanced_to(to_block + 1)
        self._reset_backoff()
        self._logger.info(
            "poll_window_processed",
            from_block=from_block,
            to_block=to_block,
            events_count=len(events),
            recorded_count=recorded,
            watermark=self._watermark.block,
        )
        return TickResult(
            status=TickStatus.SUCCESS,
            watermark=self._watermark.block,
            from_block=from_block,
            to_block=to_block,
            events=len(events),
            recorded=recorded,
        )

    async def _with_retry(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        """Run call with up to max_attempts attempts; RateLimited uses its own backoff."""
        attempt = 1
        while True:
            try:
                return await call()
            except RateLimited as e:
                if attempt >= self._max_attempts:
                    self._log_exhausted(operation, attempt, e)
                    raise
                delay = self._rate_limit_backoff.next_delay(e.retry_after)
                self._logger.warning(
                    "poll_rate_limited_retry",
                    operation=operation,
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    retry_after=e.retry_after,
                    backoff_seconds=delay,
                )
            except TransientNetworkError as e:
                if attempt >= self._max_attempts:
                    self._log_exhausted(operation, attempt, e)
                    raise
                delay = self._transient_backoff.next_delay()
                self._logger.warning(
                    "poll_transient_error_retry",
                    operation=operation,
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    error_type=type(e).__name__,
                    error_message=str(e),
                    backoff_seconds=delay,
                )
            await self._sleep(delay)
            attempt += 1

    def _log_exhausted(self, operation: str, attempts: int, error: Exception) -> None:
        self._logger.warning(
            "poll_retries_exhausted",
            operation=operation,
            attempts=attempts,
            error_type=type(error).__name__,
            error_message=str(error),
            watermark=self.watermark,
        )

    def _reset_backoff(self) -> None:
        self._transient_backoff.reset()
        self._rate_limit_backoff.reset()
