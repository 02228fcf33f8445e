"""TradeRecord: a deduplicated, classified and priced DEX buy."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class SizeCategory(str, Enum):
    """Buy size bucket on token units."""

    SMALL = "Small"
    MEDIUM = "Medium"
    WHALE = "Whale"

    @classmethod
    def for_amount(cls, token_amount: Decimal) -> SizeCategory:
        """Return the bucket for an amount in token units (< 1000 Small, < 10000 Medium)."""
        if token_amount < SMALL_UPPER_BOUND:
            return cls.SMALL
        if token_amount < MEDIUM_UPPER_BOUND:
            return cls.MEDIUM
        return cls.WHALE


SMALL_UPPER_BOUND = Decimal("1000")
MEDIUM_UPPER_BOUND = Decimal("10000")


@dataclass(frozen=True, slots=True)
class TradeRecord:
    """Accepted trade. Identity is transaction_hash; immutable once recorded."""

    chain: str
    transaction_hash: str
    recipient: str
    token_amount: Decimal
    category: SizeCategory
    fiat_value: Decimal | None
    """USD estimate; None when no price was available."""
    discovered_at: datetime
    media_url: str
    block_number: int

    @classmethod
    def create(
        cls,
        *,
        chain: str,
        transaction_hash: str,
        recipient: str,
        token_amount: Decimal,
        fiat_value: Decimal | None,
        media_url: str,
        block_number: int,
        category: SizeCategory | None = None,
        discovered_at: datetime | None = None,
    ) -> TradeRecord:
        """Build a record, deriving the category from the amount unless given."""
        if not transaction_hash.strip():
            raise ValueError("transaction_hash must be non-empty")
        return cls(
            chain=chain,
            transaction_hash=transaction_hash.strip(),
            recipient=recipient,
            token_amount=token_amount,
            category=category or SizeCategory.for_amount(token_amount),
            fiat_value=fiat_value,
            discovered_at=discovered_at or datetime.now(UTC),
            media_url=media_url,
            block_number=block_number,
        )

    @property
    def holder_suffix(self) -> str:
        """Last four characters of the recipient address."""
        return self.recipient[-4:] if len(self.recipient) >= 4 else "N/A"

    @property
    def fiat_known(self) -> bool:
        return self.fiat_value is not None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready shape served by the status API."""
        return {
            "chain": self.chain,
            "transaction_hash": self.transaction_hash,
            "recipient": self.recipient,
            "holder_suffix": self.holder_suffix,
            "token_amount": str(self.token_amount),
            "category": self.category.value,
            "fiat_value": str(self.fiat_value) if self.fiat_value is not None else None,
            "fiat_value_known": self.fiat_known,
            "discovered_at": self.discovered_at.isoformat(),
            "media_url": self.media_url,
            "block_number": self.block_number,
        }
