# -*- coding: utf-8 -*-
"""Telegram sink (async, python-telegram-bot)."""

from __future__ import annotations

import asyncio
import time
from collections import deque
from datetime import timedelta

import structlog
from typing import Any, Callable, Optional, TYPE_CHECKING

from telegram import Bot
from telegram.error import BadRequest, Forbidden, NetworkError, RetryAfter, TelegramError
from telegram.request import HTTPXRequest

from pets_tracker.exceptions import DeliveryError
from pets_tracker.notifications.strategies.base import BaseNotificationStrategy

if TYPE_CHECKING:
    from pets_tracker.config.config import Settings


class TelegramNotifier(BaseNotificationStrategy):
    """Deliver alerts to Telegram chats: video with caption, or plain message."""

    def __init__(
        self,
        settings: "Settings",
        *,
        bot: Optional[Bot] = None,
        sleep: Callable[[float], Any] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        super().__init__(settings)
        self._logger = get_logger(logger_name or self.__class__.__name__)

        cfg = self.settings.telegram
        token = cfg.api_key
        if not cfg.enabled or not token:
            raise ValueError("TelegramNotifier requires telegram.enabled and an api_key.")

        self.token: str = str(token)
        self.messages_per_minute = cfg.messages_per_minute
        self.max_retries = cfg.max_retries
        self.backoff_base_seconds = cfg.backoff_base_seconds

        self.connect_timeout = cfg.connect_timeout
        self.read_timeout = cfg.read_timeout
        self.write_timeout = cfg.write_timeout
        self.pool_timeout = cfg.pool_timeout

        self._bot: Optional[Bot] = bot
        self._sleep = sleep
        self._clock = clock
        self._running = False
        self._sent_at: deque[float] = deque()
        self._rate_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._running

    async def initialize(self) -> None:
        if self._running:
            self._logger.warning("telegram_already_running")
            return
        if self._bot is None:
            request = HTTPXRequest(
                connect_timeout=self.connect_timeout,
                read_timeout=self.read_timeout,
                write_timeout=self.write_timeout,
                pool_timeout=self.pool_timeout,
            )
            self._bot = Bot(token=self.token, request=request)
        self._running = True

    async def shutdown(self) -> None:
        if not self._running:
            return
        self._bot = None
        self._running = False

    async def deliver(self, channel_id: str, text: str, media_url: str | None = None) -> None:
        if not self._running or self._bot is None:
            raise DeliveryError("telegram sink is not running", channel_id=channel_id)

        await self._apply_rate_limit()
        last_error: Optional[TelegramError] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                await self._send(channel_id, text, media_url)
            except RetryAfter as exc:
                last_error = exc
                delay = self._retry_after_seconds(exc)
                self._logger.warning(
                    "telegram_rate_limit_retry_after",
                    channel_id=channel_id,
                    retry_seconds=delay,
                )
            except (BadRequest, Forbidden) as exc:
                # Wrong chat, blocked bot, unfetchable media: retrying cannot help.
                raise DeliveryError(
                    str(exc), channel_id=channel_id, permanent=True, cause=exc
                ) from exc
            except TelegramError as exc:
                last_error = exc
                delay = self._backoff(attempt)
                self._logger.warning(
                    "telegram_network_error_retry"
                    if isinstance(exc, NetworkError)
                    else "telegram_error_retry",
                    channel_id=channel_id,
                    error_type=type(exc).__name__,
                    attempt=attempt,
                    max_retries=self.max_retries,
                    backoff_seconds=delay,
                )
            else:
                return
            if attempt < self.max_retries:
                await self._sleep(delay)

        raise DeliveryError(
            f"telegram delivery failed after {self.max_retries} attempts",
            channel_id=channel_id,
            cause=last_error,
        ) from last_error

    async def _send(self, channel_id: str, text: str, media_url: str | None) -> None:
        assert self._bot is not None
        if media_url:
            await self._bot.send_video(
                chat_id=channel_id,
                video=media_url,
                caption=text,
                parse_mode="HTML",
            )
        else:
            await self._bot.send_message(chat_id=channel_id, text=text, parse_mode="HTML")

    def _backoff(self, attempt: int) -> float:
        return min(60.0, self.backoff_base_seconds * (2 ** (attempt - 1)))

    @staticmethod
    def _retry_after_seconds(exc: RetryAfter) -> float:
        """RetryAfter.retry_after is an int or a timedelta depending on the PTB version."""
        value = exc.retry_after
        if isinstance(value, timedelta):
            return value.total_seconds()
        return float(value)

    async def _apply_rate_limit(self) -> None:
        """Wait for and reserve one of messages_per_minute slots in the trailing 60 seconds.

        Concurrent deliveries queue on the lock, so each one re-checks the
        window after the previous reservation.
        """
        async with self._rate_lock:
            while True:
                now = self._clock()
                while self._sent_at and self._sent_at[0] <= now - 60:
                    self._sent_at.popleft()
                if len(self._sent_at) < self.messages_per_minute:
                    self._sent_at.append(now)
                    return
                wait = 60 - (now - self._sent_at[0])
                self._logger.debug("telegram_rate_limit_wait", wait_seconds=wait)
                await self._sleep(wait)
