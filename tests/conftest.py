# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import pytest

from pets_tracker.config import Settings
from pets_tracker.exceptions import DeliveryError
from pets_tracker.models.price_snapshot import PriceSnapshot
from pets_tracker.models.trade_record import TradeRecord
from pets_tracker.models.transfer_event import TransferEvent
from pets_tracker.notifications.strategies.base import BaseNotificationStrategy

BSC_POOL = "0x4bdece4e422fa015336234e4fc4d39ae6dd75b01"
RECIPIENT = "0x2d27b6e21b3d4d7c9a43fdf58f12345678907706"


@pytest.fixture
def settings() -> Settings:
    """Settings with Telegram off and no status server, independent of the local .env."""
    return Settings.from_env(
        _env_file=None,
        telegram={"enabled": False},
        status_api={"enabled": False},
    )


@pytest.fixture
def now_utc() -> datetime:
    """Stable UTC timestamp for deterministic assertions."""
    return datetime(2026, 2, 13, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def D() -> Callable[[Any], Decimal]:
    """Decimal helper: D('1.23') -> Decimal('1.23')."""
    return lambda value: Decimal(str(value))


@pytest.fixture
def tx_hash_factory() -> Callable[[], str]:
    """Unique 0x-prefixed 32-byte hashes."""
    counter = itertools.count(1)
    return lambda: f"0x{next(counter):064x}"


@pytest.fixture
def transfer_event_factory(tx_hash_factory: Callable[[], str]) -> Callable[..., TransferEvent]:
    """Build a BSC pool -> recipient TransferEvent (5000 tokens at block 997 by default)."""

    def _build(**overrides: Any) -> TransferEvent:
        return TransferEvent(
            chain=overrides.pop("chain", "bsc"),
            transaction_hash=overrides.pop("transaction_hash", None) or tx_hash_factory(),
            from_address=overrides.pop("from_address", BSC_POOL),
            to_address=overrides.pop("to_address", RECIPIENT),
            raw_amount=overrides.pop("raw_amount", 5000 * 10**18),
            block_number=overrides.pop("block_number", 997),
            log_index=overrides.pop("log_index", 0),
        )

    return _build


@pytest.fixture
def trade_record_factory(
    tx_hash_factory: Callable[[], str],
    now_utc: datetime,
) -> Callable[..., TradeRecord]:
    """Build TradeRecord with sensible defaults and easy overrides."""

    def _build(**overrides: Any) -> TradeRecord:
        return TradeRecord.create(
            chain=overrides.pop("chain", "bsc"),
            transaction_hash=overrides.pop("transaction_hash", None) or tx_hash_factory(),
            recipient=overrides.pop("recipient", RECIPIENT),
            token_amount=overrides.pop("token_amount", Decimal("5000")),
            fiat_value=overrides.pop("fiat_value", Decimal("50.00")),
            media_url=overrides.pop(
                "media_url", "https://res.cloudinary.com/demo/video/upload/medium.mp4"
            ),
            block_number=overrides.pop("block_number", 997),
            category=overrides.pop("category", None),
            discovered_at=overrides.pop("discovered_at", now_utc),
        )

    return _build


@pytest.fixture
def price_snapshot_factory(now_utc: datetime) -> Callable[..., PriceSnapshot]:
    """PriceSnapshot priced at $0.01 per token unless overridden."""

    def _build(**overrides: Any) -> PriceSnapshot:
        return PriceSnapshot(
            prices=overrides.pop("prices", {"micropets": Decimal("0.01")}),
            fetched_at=overrides.pop("fetched_at", now_utc),
            source=overrides.pop("source", "live"),
        )

    return _build


class RecordingSink(BaseNotificationStrategy):
    """Sink that records deliveries. Channels in `fail` always fail; `fail_media` fail only with media."""

    def __init__(
        self,
        settings: Settings,
        *,
        fail: tuple[str, ...] = (),
        fail_media: tuple[str, ...] = (),
        delay: float = 0.0,
    ) -> None:
        super().__init__(settings)
        self.deliveries: list[tuple[str, str, str | None]] = []
        self.fail = set(fail)
        self.fail_media = set(fail_media)
        self.delay = delay
        self.active = 0
        self.max_active = 0
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def initialize(self) -> None:
        self._running = True

    async def shutdown(self) -> None:
        self._running = False

    async def deliver(self, channel_id: str, text: str, media_url: str | None = None) -> None:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if channel_id in self.fail:
                raise DeliveryError("bot was blocked", channel_id=channel_id, permanent=True)
            if media_url and channel_id in self.fail_media:
                raise DeliveryError("video rejected", channel_id=channel_id)
            self.deliveries.append((channel_id, text, media_url))
        finally:
            self.active -= 1

    def channels(self) -> list[str]:
        return [channel for channel, _, _ in self.deliveries]


@pytest.fixture
def recording_sink_factory(settings: Settings) -> Callable[..., RecordingSink]:
    """Build a RecordingSink bound to the test settings."""
    return lambda **kwargs: RecordingSink(settings, **kwargs)
