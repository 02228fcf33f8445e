"""Notification types: styler protocol and fan-out outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pets_tracker.models.trade_record import TradeRecord


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    FALLBACK = "fallback"
    """Rich-media delivery failed; the text-only rendering was delivered."""
    FAILED = "failed"


@dataclass(frozen=True)
class FanoutReport:
    """Per-channel outcome of one broadcast."""

    transaction_hash: str
    delivered: tuple[str, ...] = field(default_factory=tuple)
    fallback: tuple[str, ...] = field(default_factory=tuple)
    failed: tuple[str, ...] = field(default_factory=tuple)

    @property
    def total(self) -> int:
        return len(self.delivered) + len(self.fallback) + len(self.failed)

    @property
    def succeeded(self) -> tuple[str, ...]:
        """Channels that received the alert in either rendering."""
        return self.delivered + self.fallback

    @property
    def partial_failure(self) -> bool:
        return bool(self.failed)


class NotificationStyler(Protocol):
    """Render a TradeRecord into the text sent to subscribers."""

    def render_trade(self, record: TradeRecord) -> str:
        """Return the rich rendering sent together with the record's media."""
        ...

    def render_trade_fallback(self, record: TradeRecord) -> str:
        """Return the text-only rendering used when media delivery fails."""
        ...
