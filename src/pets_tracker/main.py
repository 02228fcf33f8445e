# -*- coding: utf-8 -*-
"""
Entry point for the PETS buy tracker.

Orchestrates: logging, settings validation, container, notification
dispatcher, status server, Telegram commands, per-chain polling, shutdown
(SIGINT/SIGTERM or CancelledError).
Trades flow: PollScheduler -> TradeProcessorService -> NotificationDispatcher -> NotificationFanout.

Run with: pets-tracker  (or python -m pets_tracker.main)
"""
from __future__ import annotations

import asyncio
import signal
import structlog
from typing import Any

from pets_tracker.DI import Container
from pets_tracker.config import Settings, get_settings
from pets_tracker.exceptions import ConfigurationError
from pets_tracker.logging.config import configure_logging
from pets_tracker.utils import is_hex_address


def validate_settings(settings: Settings) -> None:
    """Fail fast on missing endpoints, addresses or tokens.

    Raises:
        ConfigurationError: The first invalid or missing setting found.
    """
    if not settings.chains:
        raise ConfigurationError("BSC__ENABLED", "At least one chain must be enabled")
    for chain in settings.chains:
        prefix = chain.key.upper()
        if not chain.rpc_url.strip():
            raise ConfigurationError(f"{prefix}__RPC_URL")
        if not is_hex_address(chain.token_address):
            raise ConfigurationError(
                f"{prefix}__TOKEN_ADDRESS", f"{prefix}__TOKEN_ADDRESS is not a valid address"
            )
        if not is_hex_address(chain.pool_address):
            raise ConfigurationError(
                f"{prefix}__POOL_ADDRESS", f"{prefix}__POOL_ADDRESS is not a valid address"
            )
        if settings.trade_signal.strategy == "router":
            if not chain.router_addresses:
                raise ConfigurationError(f"{prefix}__ROUTERS")
            invalid = sorted(a for a in chain.router_addresses if not is_hex_address(a))
            if invalid:
                raise ConfigurationError(
                    f"{prefix}__ROUTERS", f"Invalid router addresses: {', '.join(invalid)}"
                )
    scheduler = settings.scheduler
    for floor_name, ceiling_name in (
        ("backoff_floor_seconds", "backoff_ceiling_seconds"),
        ("rate_limit_floor_seconds", "rate_limit_ceiling_seconds"),
    ):
        floor = getattr(scheduler, floor_name)
        ceiling = getattr(scheduler, ceiling_name)
        if ceiling < floor:
            raise ConfigurationError(
                f"SCHEDULER__{ceiling_name.upper()}",
                f"SCHEDULER__{ceiling_name.upper()} ({ceiling}) is below "
                f"SCHEDULER__{floor_name.upper()} ({floor})",
            )
    if settings.telegram.enabled and not settings.telegram.api_key:
        raise ConfigurationError("TELEGRAM__API_KEY")


def _setup_signals(shutdown_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_event.set)
        except NotImplementedError:
            pass  # Windows has no add_signal_handler


async def run(shutdown_event: asyncio.Event | None = None) -> None:
    configure_logging()
    logger: Any = structlog.get_logger("main")
    settings = get_settings()
    try:
        validate_settings(settings)
    except ConfigurationError as e:
        logger.error("main_invalid_configuration", setting=e.setting, message=str(e))
        raise

    container = Container()
    http_client = container.http_client()
    dispatcher = container.notification_dispatcher()
    runner = container.polling_runner()
    status_server = container.status_server() if settings.status_api.enabled else None
    command_bot = (
        container.command_bot()
        if settings.telegram.enabled and settings.telegram.commands_enabled
        else None
    )

    if shutdown_event is None:
        shutdown_event = asyncio.Event()
        _setup_signals(shutdown_event)

    await dispatcher.initialize()
    try:
        if status_server is not None:
            await status_server.start()
        if command_bot is not None:
            try:
                await command_bot.run()
            except Exception:
                logger.exception("main_command_bot_start_failed")

        logger.info(
            "main_tracking_started",
            chains=[c.key for c in settings.chains],
            trade_signal=settings.trade_signal.strategy,
            telegram_enabled=settings.telegram.enabled,
            status_api_enabled=settings.status_api.enabled,
        )
        await runner.run(shutdown_event)
    finally:
        if command_bot is not None:
            await command_bot.shutdown()
        if status_server is not None:
            await status_server.stop()
        await dispatcher.shutdown()
        await http_client.aclose()
        logger.info("main_shutdown_complete")


def main() -> None:
    try:
        asyncio.run(run())
    except ConfigurationError as e:
        raise SystemExit(f"Configuration error: {e}") from e


__all__ = ["run", "main", "validate_settings"]

if __name__ == "__main__":
    main()
