"""PriceSnapshot: spot prices at one point in time."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Literal

PriceSource = Literal["live", "cached", "default"]


@dataclass(frozen=True, slots=True)
class PriceSnapshot:
    """USD price per asset id. source tells whether the prices are fresh or a fallback."""

    prices: dict[str, Decimal] = field(default_factory=dict)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    source: PriceSource = "live"

    def price_of(self, asset: str) -> Decimal | None:
        """Return the price for an asset id, or None if unknown."""
        return self.prices.get(asset)

    @property
    def is_stale(self) -> bool:
        return self.source != "live"
