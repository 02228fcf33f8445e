# -*- coding: utf-8 -*-
"""Unit tests for the status HTTP endpoint."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import pytest
from aiohttp import test_utils

from pets_tracker.api import create_status_app
from pets_tracker.models.trade_record import TradeRecord
from pets_tracker.persistence.repositories.in_memory import InMemoryTradeHistoryRepository

CAPACITY = 5


@pytest.fixture
async def history(
    trade_record_factory: Callable[..., TradeRecord],
) -> InMemoryTradeHistoryRepository:
    repo = InMemoryTradeHistoryRepository(capacity=CAPACITY)
    for block in range(1, 8):
        await repo.record(trade_record_factory(block_number=block))
    return repo


@pytest.fixture
async def client(
    history: InMemoryTradeHistoryRepository,
) -> AsyncIterator[test_utils.TestClient]:
    app = create_status_app(history, capacity=CAPACITY, service_name="pets-test")
    async with test_utils.TestClient(test_utils.TestServer(app)) as test_client:
        yield test_client


async def test_transactions_default_to_capacity_newest_first(
    client: test_utils.TestClient,
) -> None:
    resp = await client.get("/api/transactions")

    assert resp.status == 200
    body = await resp.json()
    assert [item["block_number"] for item in body] == [7, 6, 5, 4, 3]
    assert body[0]["category"] == "Medium"
    assert body[0]["fiat_value"] == "50.00"
    assert body[0]["fiat_value_known"] is True
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


async def test_transactions_limit(client: test_utils.TestClient) -> None:
    resp = await client.get("/api/transactions", params={"limit": "2"})

    body = await resp.json()
    assert [item["block_number"] for item in body] == [7, 6]


async def test_transactions_limit_capped_at_capacity(client: test_utils.TestClient) -> None:
    resp = await client.get("/api/transactions", params={"limit": "500"})

    assert len(await resp.json()) == CAPACITY


async def test_transactions_limit_zero_is_empty(client: test_utils.TestClient) -> None:
    resp = await client.get("/api/transactions", params={"limit": "0"})

    assert resp.status == 200
    assert await resp.json() == []


@pytest.mark.parametrize("limit", ["abc", "-1", "1.5"])
async def test_transactions_invalid_limit(client: test_utils.TestClient, limit: str) -> None:
    resp = await client.get("/api/transactions", params={"limit": limit})

    assert resp.status == 400
    assert "error" in await resp.json()


async def test_health(client: test_utils.TestClient) -> None:
    resp = await client.get("/health")

    assert resp.status == 200
    body = await resp.json()
    assert body["status"] == "ok"
    assert body["service"] == "pets-test"
    assert body["recorded"] == CAPACITY
    assert "timestamp" in body


async def test_options_preflight(client: test_utils.TestClient) -> None:
    resp = await client.options("/api/transactions")

    assert resp.status == 204
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


async def test_post_not_allowed(client: test_utils.TestClient) -> None:
    resp = await client.post("/api/transactions")

    assert resp.status == 405
