"""ChainWatermark: per-chain block cursor."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class ChainWatermark:
    """Next block to process on a chain. Never moves backwards except through an explicit reset."""

    chain: str
    block: int

    @classmethod
    def seed(cls, chain: str, height: int, lookback_blocks: int) -> ChainWatermark:
        """Initial cursor: lookback_blocks behind the current height, floored at 0."""
        return cls(chain=chain, block=max(0, height - max(0, lookback_blocks)))

    def advanced_to(self, block: int) -> ChainWatermark:
        """Return a watermark moved forward to block. Raises ValueError on a backwards move."""
        if block < self.block:
            raise ValueError(
                f"Watermark for {self.chain} cannot move backwards ({self.block} -> {block})"
            )
        return replace(self, block=block)
