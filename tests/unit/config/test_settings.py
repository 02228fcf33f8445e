# -*- coding: utf-8 -*-
"""Unit tests for Settings parsing and chain helpers."""

from __future__ import annotations

from decimal import Decimal

import pytest

from pets_tracker.config import PriceSettings, Settings


def test_defaults_enable_both_chains_bsc_first(settings: Settings) -> None:
    assert [c.key for c in settings.chains] == ["bsc", "ethereum"]
    assert settings.history.capacity == 100
    assert settings.scheduler.max_attempts == 5
    assert settings.trade_signal.strategy == "router"


def test_disabled_chain_is_excluded_but_still_addressable() -> None:
    settings = Settings.from_env(_env_file=None, bsc={"enabled": False})

    assert [c.key for c in settings.chains] == ["ethereum"]
    assert settings.chain("bsc").enabled is False


def test_chain_lookup_unknown_key_raises(settings: Settings) -> None:
    with pytest.raises(KeyError):
        settings.chain("solana")


def test_router_addresses_are_parsed_and_lower_cased() -> None:
    settings = Settings.from_env(
        _env_file=None,
        bsc={"routers": " 0xAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA , ,0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"},
    )

    assert settings.bsc.router_addresses == frozenset(
        {"0x" + "a" * 40, "0x" + "b" * 40}
    )


def test_default_routers_present(settings: Settings) -> None:
    assert "0x10ed43c718714eb63d5aa57b78b54704e256024e" in settings.bsc.router_addresses
    assert settings.ethereum.router_addresses


def test_env_nested_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ETHEREUM__POLL_SECONDS", "15")
    monkeypatch.setenv("SCHEDULER__RATE_LIMIT_CEILING_SECONDS", "90")

    settings = Settings(_env_file=None)

    assert settings.ethereum.poll_seconds == 15
    assert settings.scheduler.rate_limit_ceiling_seconds == 90


def test_tx_url_uses_explorer_prefix(settings: Settings) -> None:
    assert settings.bsc.tx_url("0xabc") == "https://bscscan.com/tx/0xabc"
    assert settings.ethereum.tx_url("0xabc") == "https://etherscan.io/tx/0xabc"


def test_default_prices_parsing_ignores_malformed_entries() -> None:
    price = PriceSettings(default_prices="micropets:0.01, bad, ethereum:abc, :1,binancecoin: 600")

    assert price.default_prices == {
        "micropets": Decimal("0.01"),
        "binancecoin": Decimal("600"),
    }
