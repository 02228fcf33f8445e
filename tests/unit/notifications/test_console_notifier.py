# -*- coding: utf-8 -*-
"""Unit tests for ConsoleNotifier."""

from __future__ import annotations

import pytest

from pets_tracker.config import Settings
from pets_tracker.exceptions import DeliveryError
from pets_tracker.notifications import ConsoleNotifier


async def test_prints_plain_text_with_media_line(
    settings: Settings, capsys: pytest.CaptureFixture[str]
) -> None:
    notifier = ConsoleNotifier(settings)
    await notifier.initialize()

    await notifier.deliver("42", "<b>Whale Buy</b> | BNB Pair", "https://cdn/video.mp4")

    out = capsys.readouterr().out
    assert "--- to 42 ---" in out
    assert "Whale Buy | BNB Pair" in out
    assert "<b>" not in out
    assert "[media] https://cdn/video.mp4" in out


async def test_deliver_requires_running(settings: Settings) -> None:
    notifier = ConsoleNotifier(settings)

    with pytest.raises(DeliveryError) as exc_info:
        await notifier.deliver("42", "hello")

    assert exc_info.value.channel_id == "42"


async def test_shutdown_stops(settings: Settings) -> None:
    notifier = ConsoleNotifier(settings)
    await notifier.initialize()
    assert notifier.is_running

    await notifier.shutdown()

    assert not notifier.is_running


async def test_disabled_console_prints_nothing(capsys: pytest.CaptureFixture[str]) -> None:
    notifier = ConsoleNotifier(
        Settings.from_env(_env_file=None, telegram={"enabled": False}, console={"enabled": False})
    )
    await notifier.initialize()

    await notifier.deliver("42", "hello")

    assert capsys.readouterr().out == ""
