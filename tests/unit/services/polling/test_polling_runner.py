# -*- coding: utf-8 -*-
"""Unit tests for PollingRunner."""

from __future__ import annotations

import asyncio
import itertools
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, cast
from unittest.mock import AsyncMock

import pytest

from pets_tracker.config import Settings
from pets_tracker.models.price_snapshot import PriceSnapshot
from pets_tracker.models.transfer_event import TransferEvent
from pets_tracker.notifications.media import MediaCatalog
from pets_tracker.persistence.repositories.in_memory import InMemoryTradeHistoryRepository
from pets_tracker.services.polling import PollingRunner, PollScheduler, SchedulerState
from pets_tracker.services.trade_classification import AlwaysTradeSignal, TradeClassifier
from pets_tracker.services.trade_processing import TradeProcessorService


class _FakeScheduler:
    def __init__(self, chain_key: str, *, ignore_shutdown: bool = False) -> None:
        self.chain_key = chain_key
        self.ignore_shutdown = ignore_shutdown
        self.started = asyncio.Event()
        self.finished = False
        self.cancelled = False

    async def run(self, shutdown_event: asyncio.Event) -> None:
        self.started.set()
        try:
            if self.ignore_shutdown:
                await asyncio.Event().wait()
            await shutdown_event.wait()
            self.finished = True
        except asyncio.CancelledError:
            self.cancelled = True
            raise


async def test_runs_all_schedulers_until_shutdown() -> None:
    bsc, eth = _FakeScheduler("bsc"), _FakeScheduler("ethereum")
    runner = PollingRunner(cast(Any, [bsc, eth]), shutdown_grace_seconds=1)
    shutdown = asyncio.Event()

    task = asyncio.create_task(runner.run(shutdown))
    await asyncio.wait_for(asyncio.gather(bsc.started.wait(), eth.started.wait()), timeout=1)
    shutdown.set()
    await asyncio.wait_for(task, timeout=2)

    assert bsc.finished and eth.finished
    assert not bsc.cancelled and not eth.cancelled


async def test_stuck_scheduler_is_cancelled_after_grace() -> None:
    stuck = _FakeScheduler("bsc", ignore_shutdown=True)
    runner = PollingRunner(cast(Any, [stuck]), shutdown_grace_seconds=0.05)
    shutdown = asyncio.Event()

    task = asyncio.create_task(runner.run(shutdown))
    await asyncio.wait_for(stuck.started.wait(), timeout=1)
    shutdown.set()
    await asyncio.wait_for(task, timeout=2)

    assert stuck.cancelled


async def test_cancellation_stops_schedulers_and_propagates() -> None:
    scheduler = _FakeScheduler("ethereum")
    runner = PollingRunner(cast(Any, [scheduler]))

    task = asyncio.create_task(runner.run(asyncio.Event()))
    await asyncio.wait_for(scheduler.started.wait(), timeout=1)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert scheduler.cancelled


async def test_without_chains_waits_for_shutdown() -> None:
    runner = PollingRunner([])
    shutdown = asyncio.Event()
    shutdown.set()

    await asyncio.wait_for(runner.run(shutdown), timeout=1)


def _ethereum_client(settings: Settings) -> Any:
    heights = itertools.count(100)

    async def transfer_events(from_block: int, to_block: int) -> list[TransferEvent]:
        return [
            TransferEvent(
                chain="ethereum",
                transaction_hash=f"0x{from_block:064x}",
                from_address=settings.ethereum.pool_address,
                to_address="0x2d27b6e21b3d4d7c9a43fdf58f12345678907706",
                raw_amount=1000 * 10**18,
                block_number=to_block,
                log_index=0,
            )
        ]

    return SimpleNamespace(
        chain=settings.ethereum.model_copy(update={"poll_seconds": 0.01}),
        current_height=AsyncMock(side_effect=lambda: next(heights)),
        transfer_events=transfer_events,
    )


def _hung_bsc_client(settings: Settings) -> Any:
    entered = asyncio.Event()

    async def transfer_events(from_block: int, to_block: int) -> list[TransferEvent]:
        entered.set()
        await asyncio.Event().wait()
        return []

    return SimpleNamespace(
        chain=settings.bsc.model_copy(update={"poll_seconds": 0.01}),
        current_height=AsyncMock(return_value=1000),
        transfer_events=transfer_events,
        entered=entered,
    )


def _real_scheduler(
    settings: Settings, chain_client: Any, history: InMemoryTradeHistoryRepository
) -> PollScheduler:
    classifier = TradeClassifier(
        chain_client.chain, AlwaysTradeSignal(), MediaCatalog(settings.media)
    )
    processor = TradeProcessorService(
        classifier, history, cast(Any, SimpleNamespace(notify=lambda record: True))
    )
    oracle = SimpleNamespace(
        snapshot=AsyncMock(return_value=PriceSnapshot(prices={"micropets": Decimal("0.01")}))
    )
    return PollScheduler(chain_client, cast(Any, oracle), processor, settings.scheduler)


async def test_stalled_chain_does_not_block_the_other() -> None:
    settings = Settings.from_env(_env_file=None, telegram={"enabled": False})
    history = InMemoryTradeHistoryRepository()
    bsc_client = _hung_bsc_client(settings)
    bsc = _real_scheduler(settings, bsc_client, history)
    ethereum = _real_scheduler(settings, _ethereum_client(settings), history)
    runner = PollingRunner([bsc, ethereum], shutdown_grace_seconds=0.05)
    shutdown = asyncio.Event()

    task = asyncio.create_task(runner.run(shutdown))
    await asyncio.wait_for(bsc_client.entered.wait(), timeout=1)

    async def ethereum_recorded_three() -> None:
        while history.count() < 3:
            await asyncio.sleep(0.01)

    await asyncio.wait_for(ethereum_recorded_three(), timeout=5)
    assert bsc.state is SchedulerState.POLLING
    shutdown.set()
    await asyncio.wait_for(task, timeout=2)

    records = await history.recent(10)
    assert {r.chain for r in records} == {"ethereum"}
    assert ethereum.watermark is not None and ethereum.watermark >= 103
    # The hung window was never committed.
    assert bsc.watermark == 900
    assert bsc_client.current_height.await_count == 1
