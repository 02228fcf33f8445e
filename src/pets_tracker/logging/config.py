# -*- coding: utf-8 -*-
"""Logging configuration for structlog + Logfire."""

from __future__ import annotations

import logging
import logfire
import structlog
from typing import Any
from structlog.types import EventDict, Processor
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from pets_tracker.config import Settings, get_settings

LOG_LEVEL_TO_LOGFIRE: dict[str, str] = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARNING": "warn",
    "ERROR": "error",
    "CRITICAL": "fatal",
}

REDACTED = "***"

# Third-party loggers that are noisy at INFO (httpx logs every Telegram request URL).
_QUIET_LOGGERS = ("httpx", "telegram.ext", "aiohttp.access")


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


class ServiceContext:
    """Processor adding logger name, app/service identity and environment to each event."""

    def __init__(self, settings: Settings) -> None:
        app = settings.app
        self._static: dict[str, Any] = {
            "app_name": app.app_name,
            "environment": app.environment,
        }
        if app.service_name:
            self._static["service_name"] = app.service_name
        if app.service_version:
            self._static["service_version"] = app.service_version

    def __call__(self, logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        stdlib_logger = getattr(logger, "_logger", None)
        event_dict["logger"] = (
            getattr(stdlib_logger, "name", None) or getattr(logger, "name", "") or ""
        )
        for key, value in self._static.items():
            event_dict.setdefault(key, value)
        return event_dict


class SecretRedactor:
    """Processor replacing the Telegram bot token in string values."""

    def __init__(self, secrets: list[str]) -> None:
        self._secrets = [s for s in secrets if s]

    def __call__(self, logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        if not self._secrets:
            return event_dict
        for key, value in event_dict.items():
            if isinstance(value, str):
                for secret in self._secrets:
                    value = value.replace(secret, REDACTED)
                event_dict[key] = value
        return event_dict


def _stream_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _file_handler(settings: Settings, level: int) -> logging.Handler:
    cfg = settings.logging
    path = Path(cfg.log_file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        path,
        when=cfg.log_file_when,
        interval=cfg.log_file_interval,
        backupCount=cfg.log_file_backup_count,
        encoding="utf-8",
        utc=cfg.log_file_utc,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def build_processors(settings: Settings) -> list[Processor]:
    """Return the structlog processor chain for settings (renderer last)."""
    cfg = settings.logging
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        ServiceContext(settings),
        SecretRedactor([settings.telegram.api_key or ""]),
    ]
    if cfg.logfire_enabled:
        processors.append(logfire.StructlogProcessor())  # type: ignore[arg-type]

    if cfg.log_to_console or cfg.log_to_file:
        # A file sink forces JSON so rotated files stay machine-readable.
        if cfg.log_to_file or cfg.json_format:
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer())  # type: ignore[arg-type]
    return processors


def configure_logging(settings: Settings | None = None) -> None:
    """Configure stdlib handlers, optional Logfire and the structlog processor chain."""
    settings = settings or get_settings()
    app = settings.app
    cfg = settings.logging

    handlers: list[logging.Handler] = []
    if cfg.log_to_console:
        handlers.append(_stream_handler(_level(cfg.console_level)))
    if cfg.log_to_file:
        handlers.append(_file_handler(settings, _level(cfg.file_level)))
    if handlers:
        logging.basicConfig(
            level=min(h.level for h in handlers), handlers=handlers, force=True
        )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if cfg.logfire_enabled:
        logfire.configure(
            token=cfg.logfire_token,
            service_name=app.service_name or app.app_name,
            service_version=app.service_version,
            min_level=LOG_LEVEL_TO_LOGFIRE.get(cfg.logfire_level, "info"),  # type: ignore[arg-type]
            environment=app.environment,
        )

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
