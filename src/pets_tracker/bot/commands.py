# -*- coding: utf-8 -*-
"""Telegram command handlers (python-telegram-bot Application, long polling)."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

import structlog
from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

from pets_tracker.exceptions import DeliveryError
from pets_tracker.models.trade_record import SizeCategory, TradeRecord

if TYPE_CHECKING:
    from pets_tracker.config import Settings
    from pets_tracker.notifications import BaseNotificationStrategy, MediaCatalog
    from pets_tracker.notifications.stylers import TradeNotificationStyler
    from pets_tracker.persistence.repositories import (
        ISubscriberRepository,
        ITradeHistoryRepository,
    )

Handler = Callable[[Update, ContextTypes.DEFAULT_TYPE], Awaitable[None]]

SAMPLE_TRANSACTION_HASH = "0x" + "ab" * 32
SAMPLE_RECIPIENT = "0x" + "12" * 19 + "abcd"


class TelegramCommandBot:
    """Subscribe/unsubscribe chats and answer status queries.

    Commands: /start, /track, /stop, /stats, /status, /help, /test.
    A failing handler is logged and never propagates into the Application.
    """

    def __init__(
        self,
        settings: Settings,
        subscribers: ISubscriberRepository,
        history: ITradeHistoryRepository,
        styler: TradeNotificationStyler,
        media: MediaCatalog,
        sink: BaseNotificationStrategy,
        *,
        application: Optional[Application] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._settings = settings
        self._subscribers = subscribers
        self._history = history
        self._styler = styler
        self._media = media
        self._sink = sink
        self._application = application
        self._running = False
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def is_running(self) -> bool:
        return self._running

    def handlers(self) -> dict[str, Handler]:
        """Command name -> guarded handler."""
        return {
            "start": self._guard("start", self.start),
            "track": self._guard("track", self.track),
            "stop": self._guard("stop", self.stop),
            "stats": self._guard("stats", self.stats),
            "status": self._guard("status", self.status),
            "help": self._guard("help", self.help),
            "test": self._guard("test", self.test),
        }

    async def run(self) -> None:
        """Build (unless injected), register handlers and start long polling."""
        if self._running:
            return
        if self._application is None:
            token = self._settings.telegram.api_key
            if not token:
                raise ValueError("TelegramCommandBot requires telegram.api_key.")
            self._application = Application.builder().token(token).build()
        for name, handler in self.handlers().items():
            self._application.add_handler(CommandHandler(name, handler))

        await self._application.initialize()
        await self._application.start()
        if self._application.updater is not None:
            await self._application.updater.start_polling()
        self._running = True
        self._logger.info("command_bot_started", commands=sorted(self.handlers()))

    async def shutdown(self) -> None:
        if not self._running or self._application is None:
            return
        if self._application.updater is not None and self._application.updater.running:
            await self._application.updater.stop()
        await self._application.stop()
        await self._application.shutdown()
        self._running = False
        self._logger.info("command_bot_stopped")

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat_id = self._chat_id(update)
        added = await self._subscribers.add(chat_id)
        self._logger.info("command_start", chat_id=chat_id, newly_subscribed=added)
        await self._reply(update, self._styler.render_welcome())

    async def track(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat_id = self._chat_id(update)
        added = await self._subscribers.add(chat_id)
        self._logger.info("command_track", chat_id=chat_id, newly_subscribed=added)
        text = "🚀 Tracking started for this chat." if added else "ℹ️ This chat is already tracked."
        await self._reply(update, text)

    async def stop(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat_id = self._chat_id(update)
        removed = await self._subscribers.remove(chat_id)
        self._logger.info("command_stop", chat_id=chat_id, unsubscribed=removed)
        text = "🛑 Tracking stopped for this chat." if removed else "ℹ️ This chat was not tracked."
        await self._reply(update, text)

    async def stats(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        latest = {
            chain.key: await self._history.latest_by_chain(chain.key)
            for chain in self._settings.chains
        }
        await self._reply(update, self._styler.render_stats(latest))

    async def status(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        tracking = await self._subscribers.contains(self._chat_id(update))
        await self._reply(
            update,
            self._styler.render_status(tracking=tracking, total_recorded=self._history.count()),
        )

    async def help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._reply(update, self._styler.render_help())

    async def test(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Send a sample alert to the requesting chat only; video first, then text."""
        chat_id = self._chat_id(update)
        record = self.sample_record()
        try:
            await self._sink.deliver(chat_id, self._styler.render_trade(record), record.media_url)
            return
        except DeliveryError as e:
            self._logger.warning(
                "command_test_media_failed",
                chat_id=chat_id,
                error_message=str(e),
            )
        await self._sink.deliver(chat_id, self._styler.render_trade_fallback(record))

    def sample_record(self) -> TradeRecord:
        """A Medium buy on the first enabled chain (BSC when none is enabled)."""
        chains = self._settings.chains
        chain = chains[0] if chains else self._settings.bsc
        amount = Decimal("5000")
        category = SizeCategory.for_amount(amount)
        return TradeRecord.create(
            chain=chain.key,
            transaction_hash=SAMPLE_TRANSACTION_HASH,
            recipient=SAMPLE_RECIPIENT,
            token_amount=amount,
            category=category,
            fiat_value=Decimal("50.00"),
            media_url=self._media.url_for(category),
            block_number=0,
            discovered_at=datetime.now(UTC),
        )

    def _guard(self, name: str, handler: Handler) -> Handler:
        async def guarded(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            try:
                await handler(update, context)
            except Exception as e:
                self._logger.exception(
                    "command_failed",
                    command=name,
                    error_type=type(e).__name__,
                )

        return guarded

    @staticmethod
    def _chat_id(update: Update) -> str:
        chat = update.effective_chat
        if chat is None:
            raise ValueError("update has no chat")
        return str(chat.id)

    @staticmethod
    async def _reply(update: Update, text: str) -> None:
        message = update.effective_message
        if message is None:
            return
        await message.reply_text(text, parse_mode="HTML")
