# -*- coding: utf-8 -*-
"""Unit tests for the DEX trade signals."""

from __future__ import annotations

from collections.abc import Callable
from types import SimpleNamespace
from typing import Any, cast
from unittest.mock import AsyncMock

import pytest

from pets_tracker.config import Settings
from pets_tracker.exceptions import DataUnavailable
from pets_tracker.models.transfer_event import TransferEvent
from pets_tracker.services.trade_classification import (
    AlwaysTradeSignal,
    RouterAddressSignal,
    build_trade_signal,
)

ROUTER = "0x10ed43c718714eb63d5aa57b78b54704e256024e"


def _chain_client(target: str | None, settings: Settings) -> Any:
    return SimpleNamespace(
        chain=settings.bsc,
        transaction_target=AsyncMock(return_value=target),
    )


async def test_router_signal_accepts_known_router(
    settings: Settings, transfer_event_factory: Callable[..., TransferEvent]
) -> None:
    client = _chain_client(ROUTER, settings)
    signal = RouterAddressSignal(client, [ROUTER.upper().replace("0X", "0x")])
    event = transfer_event_factory()

    assert await signal.is_trade(event) is True
    client.transaction_target.assert_awaited_once_with(event.transaction_hash)


async def test_router_signal_rejects_other_target(
    settings: Settings, transfer_event_factory: Callable[..., TransferEvent]
) -> None:
    signal = RouterAddressSignal(_chain_client("0x" + "7" * 40, settings), [ROUTER])

    assert await signal.is_trade(transfer_event_factory()) is False


async def test_router_signal_unknown_transaction_is_data_unavailable(
    settings: Settings, transfer_event_factory: Callable[..., TransferEvent]
) -> None:
    signal = RouterAddressSignal(_chain_client(None, settings), [ROUTER])

    with pytest.raises(DataUnavailable):
        await signal.is_trade(transfer_event_factory())


async def test_always_signal(transfer_event_factory: Callable[..., TransferEvent]) -> None:
    assert await AlwaysTradeSignal().is_trade(transfer_event_factory()) is True


def test_build_trade_signal(settings: Settings) -> None:
    client = cast(Any, _chain_client(None, settings))

    router_signal = build_trade_signal("router", client)

    assert isinstance(router_signal, RouterAddressSignal)
    assert router_signal.router_addresses == settings.bsc.router_addresses
    assert isinstance(build_trade_signal("always", client), AlwaysTradeSignal)
    with pytest.raises(ValueError):
        build_trade_signal("volume", client)
