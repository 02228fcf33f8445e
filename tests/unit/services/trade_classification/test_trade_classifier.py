# -*- coding: utf-8 -*-
"""Unit tests for TradeClassifier."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, cast
from unittest.mock import AsyncMock

import pytest

from pets_tracker.config import Settings
from pets_tracker.exceptions import DataUnavailable, TransientNetworkError
from pets_tracker.models.price_snapshot import PriceSnapshot
from pets_tracker.models.trade_record import SizeCategory, TradeRecord
from pets_tracker.models.transfer_event import TransferEvent
from pets_tracker.notifications.media import MediaCatalog
from pets_tracker.services.trade_classification import (
    AlwaysTradeSignal,
    Rejected,
    RejectionReason,
    TradeClassifier,
)


def _classifier(
    settings: Settings,
    now_utc: datetime,
    signal: Any | None = None,
) -> TradeClassifier:
    return TradeClassifier(
        settings.bsc,
        signal or AlwaysTradeSignal(),
        MediaCatalog(settings.media),
        clock=lambda: now_utc,
    )


def _units(amount: str) -> int:
    return int(Decimal(amount).scaleb(18))


@pytest.mark.parametrize(
    ("amount", "category"),
    [
        ("999.999999", SizeCategory.SMALL),
        ("1000", SizeCategory.MEDIUM),
        ("9999.999999", SizeCategory.MEDIUM),
        ("10000", SizeCategory.WHALE),
    ],
)
async def test_category_boundaries(
    settings: Settings,
    now_utc: datetime,
    transfer_event_factory: Callable[..., TransferEvent],
    price_snapshot_factory: Callable[..., PriceSnapshot],
    amount: str,
    category: SizeCategory,
) -> None:
    classifier = _classifier(settings, now_utc)

    result = await classifier.evaluate(
        transfer_event_factory(raw_amount=_units(amount)), price_snapshot_factory()
    )

    assert isinstance(result, TradeRecord)
    assert result.category is category
    assert result.token_amount == Decimal(amount)


async def test_accepted_trade_fields(
    settings: Settings,
    now_utc: datetime,
    transfer_event_factory: Callable[..., TransferEvent],
    price_snapshot_factory: Callable[..., PriceSnapshot],
) -> None:
    classifier = _classifier(settings, now_utc)
    event = transfer_event_factory(raw_amount=_units("5000"), block_number=997)

    result = await classifier.evaluate(event, price_snapshot_factory())

    assert isinstance(result, TradeRecord)
    assert result.fiat_value == Decimal("50.00")
    assert result.category is SizeCategory.MEDIUM
    assert result.chain == "bsc"
    assert result.transaction_hash == event.transaction_hash
    assert result.recipient == event.to_address
    assert result.block_number == 997
    assert result.discovered_at == now_utc
    assert result.media_url == MediaCatalog(settings.media).url_for(SizeCategory.MEDIUM)


async def test_fiat_value_rounds_to_cents(
    settings: Settings,
    now_utc: datetime,
    transfer_event_factory: Callable[..., TransferEvent],
    price_snapshot_factory: Callable[..., PriceSnapshot],
) -> None:
    classifier = _classifier(settings, now_utc)
    snapshot = price_snapshot_factory(prices={"micropets": Decimal("0.0123456")})

    result = await classifier.evaluate(
        transfer_event_factory(raw_amount=_units("1234.5")), snapshot
    )

    assert isinstance(result, TradeRecord)
    assert result.fiat_value == Decimal("15.24")


async def test_unknown_price_still_produces_record(
    settings: Settings,
    now_utc: datetime,
    transfer_event_factory: Callable[..., TransferEvent],
    price_snapshot_factory: Callable[..., PriceSnapshot],
) -> None:
    classifier = _classifier(settings, now_utc)

    result = await classifier.evaluate(
        transfer_event_factory(), price_snapshot_factory(prices={}, source="default")
    )

    assert isinstance(result, TradeRecord)
    assert result.fiat_value is None
    assert result.fiat_known is False


async def test_rejects_transfer_not_from_pool(
    settings: Settings,
    now_utc: datetime,
    transfer_event_factory: Callable[..., TransferEvent],
    price_snapshot_factory: Callable[..., PriceSnapshot],
) -> None:
    signal = SimpleNamespace(is_trade=AsyncMock(return_value=True))
    classifier = _classifier(settings, now_utc, signal)

    result = await classifier.evaluate(
        transfer_event_factory(from_address="0x" + "9" * 40), price_snapshot_factory()
    )

    assert result == Rejected(reason=RejectionReason.NOT_FROM_POOL)
    signal.is_trade.assert_not_awaited()


async def test_pool_match_is_case_insensitive(
    settings: Settings,
    now_utc: datetime,
    transfer_event_factory: Callable[..., TransferEvent],
    price_snapshot_factory: Callable[..., PriceSnapshot],
) -> None:
    classifier = _classifier(settings, now_utc)
    event = transfer_event_factory(from_address=settings.bsc.pool_address.upper().replace("0X", "0x"))

    assert isinstance(await classifier.evaluate(event, price_snapshot_factory()), TradeRecord)


async def test_rejects_non_trade(
    settings: Settings,
    now_utc: datetime,
    transfer_event_factory: Callable[..., TransferEvent],
    price_snapshot_factory: Callable[..., PriceSnapshot],
) -> None:
    signal = SimpleNamespace(is_trade=AsyncMock(return_value=False))
    classifier = _classifier(settings, now_utc, cast(Any, signal))

    result = await classifier.evaluate(transfer_event_factory(), price_snapshot_factory())

    assert isinstance(result, Rejected)
    assert result.reason is RejectionReason.NOT_A_TRADE


async def test_rejects_zero_amount_without_consulting_signal(
    settings: Settings,
    now_utc: datetime,
    transfer_event_factory: Callable[..., TransferEvent],
    price_snapshot_factory: Callable[..., PriceSnapshot],
) -> None:
    signal = SimpleNamespace(is_trade=AsyncMock(return_value=True))
    classifier = _classifier(settings, now_utc, cast(Any, signal))

    result = await classifier.evaluate(transfer_event_factory(raw_amount=0), price_snapshot_factory())

    assert isinstance(result, Rejected)
    assert result.reason is RejectionReason.VALUE_UNAVAILABLE
    signal.is_trade.assert_not_awaited()


async def test_signal_data_unavailable_rejects(
    settings: Settings,
    now_utc: datetime,
    transfer_event_factory: Callable[..., TransferEvent],
    price_snapshot_factory: Callable[..., PriceSnapshot],
) -> None:
    signal = SimpleNamespace(is_trade=AsyncMock(side_effect=DataUnavailable("tx not found")))
    classifier = _classifier(settings, now_utc, cast(Any, signal))

    result = await classifier.evaluate(transfer_event_factory(), price_snapshot_factory())

    assert isinstance(result, Rejected)
    assert result.reason is RejectionReason.VALUE_UNAVAILABLE
    assert result.detail == "tx not found"


async def test_signal_network_error_propagates(
    settings: Settings,
    now_utc: datetime,
    transfer_event_factory: Callable[..., TransferEvent],
    price_snapshot_factory: Callable[..., PriceSnapshot],
) -> None:
    signal = SimpleNamespace(is_trade=AsyncMock(side_effect=TransientNetworkError("rpc down")))
    classifier = _classifier(settings, now_utc, cast(Any, signal))

    with pytest.raises(TransientNetworkError):
        await classifier.evaluate(transfer_event_factory(), price_snapshot_factory())
