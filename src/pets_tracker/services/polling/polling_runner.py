"""Orchestrator: runs every chain's PollScheduler until shutdown (signal or CancelledError)."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from pets_tracker.services.polling.poll_scheduler import PollScheduler


class PollingRunner:
    """Runs scheduler.run() for each chain in parallel until shutdown_event or CancelledError."""

    def __init__(
        self,
        schedulers: Sequence[PollScheduler],
        *,
        shutdown_grace_seconds: float = 30.0,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            schedulers: One PollScheduler per enabled chain.
            shutdown_grace_seconds: How long an in-flight tick may run after shutdown is requested.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._schedulers = list(schedulers)
        self._grace = shutdown_grace_seconds
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def schedulers(self) -> list[PollScheduler]:
        return list(self._schedulers)

    async def run(self, shutdown_event: asyncio.Event) -> None:
        """Start one task per scheduler; on shutdown let in-flight ticks finish within the grace period."""
        self._logger.info(
            "polling_runner_started",
            chains=[s.chain_key for s in self._schedulers],
        )
        tasks = [
            asyncio.create_task(scheduler.run(shutdown_event), name=f"poll-{scheduler.chain_key}")
            for scheduler in self._schedulers
        ]
        if not tasks:
            self._logger.warning("polling_runner_no_chains")
            await shutdown_event.wait()
            return

        try:
            await shutdown_event.wait()
        except asyncio.CancelledError:
            self._logger.info(
                "polling_runner_shutdown_cancelled",
                message="Kernel or task cancelled; stopping system",
            )
            await self._cancel(tasks)
            raise

        self._logger.info("polling_runner_shutdown_started", grace_seconds=self._grace)
        _, pending = await asyncio.wait(tasks, timeout=self._grace)
        if pending:
            self._logger.warning(
                "polling_runner_grace_expired",
                pending_chains=[t.get_name() for t in pending],
            )
        await self._cancel(tasks)
        self._logger.info("polling_runner_shutdown_complete")

    @staticmethod
    async def _cancel(tasks: list[asyncio.Task[None]]) -> None:
        for t in tasks:
            t.cancel()
        for t in tasks:
            try:
                await t
            except asyncio.CancelledError:
                pass
