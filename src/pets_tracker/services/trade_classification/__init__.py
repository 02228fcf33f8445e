"""Trade classification: DEX-trade signal and size/fiat classifier."""

from pets_tracker.services.trade_classification.classifier import (
    Rejected,
    RejectionReason,
    TradeClassifier,
)
from pets_tracker.services.trade_classification.trade_signal import (
    AlwaysTradeSignal,
    ITradeSignal,
    RouterAddressSignal,
    build_trade_signal,
)

__all__ = [
    "AlwaysTradeSignal",
    "ITradeSignal",
    "Rejected",
    "RejectionReason",
    "RouterAddressSignal",
    "TradeClassifier",
    "build_trade_signal",
]
