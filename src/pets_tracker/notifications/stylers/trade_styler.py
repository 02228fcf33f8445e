# -*- coding: utf-8 -*-
"""Buy-alert styler with emoji sections (Telegram HTML)."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Mapping

from pets_tracker.models.trade_record import SizeCategory, TradeRecord
from pets_tracker.notifications.media import MediaCatalog
from pets_tracker.notifications.types import NotificationStyler

if TYPE_CHECKING:
    from pets_tracker.config import ChainSettings, Settings

VIDEO_UNAVAILABLE_NOTICE = "⚠️ Video unavailable, showing text alert only."

_CATEGORY_EMOJI: dict[SizeCategory, str] = {
    SizeCategory.SMALL: "🐾",
    SizeCategory.MEDIUM: "🚀",
    SizeCategory.WHALE: "🐋",
}


class TradeNotificationStyler(NotificationStyler):
    """Render TradeRecords and bot replies as Telegram HTML."""

    def __init__(self, settings: "Settings") -> None:
        self._settings = settings
        self._app = settings.app

    def category_label(self, category: SizeCategory) -> str:
        if category is SizeCategory.SMALL:
            return f"{self._app.brand_name} Buy"
        if category is SizeCategory.MEDIUM:
            return "Medium Bullish Buy"
        return "Whale Buy"

    def render_trade(self, record: TradeRecord) -> str:
        """Render the caption sent with the category video."""
        return self._render(record, notice=None)

    def render_trade_fallback(self, record: TradeRecord) -> str:
        """Render the text-only alert used when the video cannot be sent."""
        return self._render(record, notice=VIDEO_UNAVAILABLE_NOTICE)

    def _render(self, record: TradeRecord, *, notice: str | None) -> str:
        chain = self._chain(record.chain)
        chain_name = chain.name if chain is not None else record.chain
        pair_label = chain.pair_label if chain is not None else record.chain
        symbol = self._app.token_symbol
        emoji = _CATEGORY_EMOJI.get(record.category, "🆕")

        lines = [
            self._app.bot_handle,
            f"{emoji} <b>{self.category_label(record.category)} | {pair_label}</b>",
            MediaCatalog.placeholder_for(record.category),
        ]
        if notice:
            lines.append(notice)
        lines.append("")
        lines.append(
            self._section(
                "📊 Trade Summary",
                [
                    ("💰 Value", self._format_fiat(record.fiat_value)),
                    ("📈 Market Cap", self._app.market_cap_label),
                    ("🧳 Holdings", f"{self._format_tokens(record.token_amount)} ${symbol}"),
                    ("🏷️ Size", record.category.value),
                    ("👤 Holder", f"...{record.holder_suffix}"),
                ],
            )
        )
        lines.append(
            self._section(
                "🔗 On-chain",
                [
                    ("⛓️ Chain", chain_name),
                    ("📦 Block", str(record.block_number)),
                    ("📬 Recipient", f"<code>{record.recipient}</code>"),
                    ("🧾 Transaction", self._tx_link(chain, record.transaction_hash)),
                    ("🕒 Discovered", self._format_timestamp(record.discovered_at)),
                    ("🎬 Video", record.media_url),
                ],
            )
        )
        lines.append(self._links(chain))
        return "\n".join(lines).strip()

    def render_stats(self, latest: Mapping[str, TradeRecord | None]) -> str:
        """Render the most recent recorded buy per chain."""
        lines = ["📊 <b>Latest Buys</b>", "─" * 12]
        if not latest:
            lines.append("No chains are being tracked.")
        for chain_key, record in latest.items():
            chain = self._chain(chain_key)
            name = chain.name if chain is not None else chain_key
            if record is None:
                lines.append(f"⛓️ <b>{name}:</b> no buys recorded yet")
                continue
            lines.append(
                f"⛓️ <b>{name}:</b> {self._format_tokens(record.token_amount)} "
                f"${self._app.token_symbol} ({self._format_fiat(record.fiat_value)}, "
                f"{record.category.value}) at {self._format_timestamp(record.discovered_at)}"
            )
            lines.append(f"   {self._tx_link(chain, record.transaction_hash)}")
        return "\n".join(lines)

    def render_status(self, *, tracking: bool, total_recorded: int) -> str:
        state = "🟢 Tracking" if tracking else "🔴 Not tracking"
        return (
            f"ℹ️ <b>Status</b>\n{'─' * 12}\n"
            f"{state}\n"
            f"🧾 <b>Recorded buys:</b> {total_recorded}"
        )

    def render_welcome(self) -> str:
        chains = ", ".join(c.name for c in self._settings.chains) or "no chains"
        return (
            f"👋 <b>Welcome to {self._app.brand_name} Buy Tracker</b>\n"
            f"Tracking ${self._app.token_symbol} buys on {chains}.\n"
            "Use /help to see all commands."
        )

    def render_help(self) -> str:
        return "\n".join(
            [
                f"🐾 <b>{self._app.brand_name} Buy Tracker</b>",
                "─" * 12,
                "/start - subscribe this chat and show the welcome message",
                "/track - subscribe this chat to buy alerts",
                "/stop - unsubscribe this chat",
                "/stats - latest recorded buy per chain",
                "/status - tracking state and number of recorded buys",
                "/test - send a sample buy alert to this chat",
                "/help - show this message",
            ]
        )

    def _chain(self, key: str) -> "ChainSettings | None":
        try:
            return self._settings.chain(key)
        except KeyError:
            return None

    def _links(self, chain: "ChainSettings | None") -> str:
        parts = [f'📍 <a href="{self._app.staking_url}">Staking</a>']
        if chain is not None and chain.chart_url:
            parts.append(f'📊 <a href="{chain.chart_url}">Chart</a>')
        parts.append(f'🛍️ <a href="{self._app.merch_url}">Merch</a>')
        if chain is not None and chain.swap_url:
            parts.append(f'💰 <a href="{chain.swap_url}">Buy ${self._app.token_symbol}</a>')
        return " | ".join(parts)

    @staticmethod
    def _tx_link(chain: "ChainSettings | None", transaction_hash: str) -> str:
        if chain is None:
            return f"<code>{transaction_hash}</code>"
        return (
            f'<a href="{chain.tx_url(transaction_hash)}">{chain.explorer_name}</a> '
            f"<code>{transaction_hash}</code>"
        )

    def _section(self, header: str, rows: list[tuple[str, Any]]) -> str:
        """Format a section with a header and rows."""
        content_lines = [
            f"{self._format_label(label)} {value}" for label, value in rows if value
        ]
        if not content_lines:
            return ""
        return "\n".join([f"{self._format_heading(header)}\n{'─' * 12}", *content_lines]) + "\n"

    @staticmethod
    def _format_fiat(value: Decimal | None) -> str:
        if value is None:
            return "unknown"
        return f"${value:,.2f}"

    @staticmethod
    def _format_tokens(amount: Decimal) -> str:
        """Thousands separator, up to six decimals, trailing zeros dropped."""
        text = f"{amount:,.6f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text

    @staticmethod
    def _format_timestamp(value: datetime) -> str:
        return value.isoformat()

    @staticmethod
    def _format_heading(text: str) -> str:
        emoji, _, remainder = text.partition(" ")
        if remainder:
            return f"{emoji} <b>{remainder}</b>"
        return f"<b>{text}</b>"

    @staticmethod
    def _format_label(label: str) -> str:
        emoji, _, remainder = label.partition(" ")
        if remainder:
            return f"{emoji} <b>{remainder}:</b>"
        return f"<b>{label}:</b>"
