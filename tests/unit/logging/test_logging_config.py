# -*- coding: utf-8 -*-
"""Unit tests for the structlog processor chain."""

from __future__ import annotations

from types import SimpleNamespace

import structlog

from pets_tracker.config import Settings
from pets_tracker.logging.config import REDACTED, SecretRedactor, ServiceContext, build_processors


def test_service_context_adds_identity(settings: Settings) -> None:
    processor = ServiceContext(settings)
    logger = SimpleNamespace(name="PollScheduler.bsc")

    event = processor(logger, "info", {"event": "poll_window_processed"})

    assert event["logger"] == "PollScheduler.bsc"
    assert event["app_name"] == "pets-tracker"
    assert event["environment"] == settings.app.environment


def test_secret_redactor_masks_token() -> None:
    processor = SecretRedactor(["123456:secret"])

    event = processor(
        None,
        "warning",
        {"event": "http_failed", "url": "https://api.telegram.org/bot123456:secret/sendVideo", "n": 3},
    )

    assert event["url"] == f"https://api.telegram.org/bot{REDACTED}/sendVideo"
    assert event["n"] == 3


def test_secret_redactor_without_secrets_is_noop() -> None:
    event = {"event": "x", "value": "plain"}

    assert SecretRedactor([""])(None, "info", dict(event)) == event


def test_console_renderer_by_default(settings: Settings) -> None:
    processors = build_processors(settings)

    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


def test_json_renderer_when_requested() -> None:
    settings = Settings.from_env(_env_file=None, logging={"json_format": True})

    processors = build_processors(settings)

    assert isinstance(processors[-1], structlog.processors.JSONRenderer)
