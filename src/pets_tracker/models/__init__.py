# -*- coding: utf-8 -*-
"""Domain models."""

from pets_tracker.models.chain_watermark import ChainWatermark
from pets_tracker.models.price_snapshot import PriceSnapshot
from pets_tracker.models.seen_transaction import SeenTransaction
from pets_tracker.models.trade_record import SizeCategory, TradeRecord
from pets_tracker.models.transfer_event import TransferEvent

__all__ = [
    "ChainWatermark",
    "PriceSnapshot",
    "SeenTransaction",
    "SizeCategory",
    "TradeRecord",
    "TransferEvent",
]
