# -*- coding: utf-8 -*-
"""Application services."""

from pets_tracker.services.polling import (
    ExponentialBackoff,
    PollingRunner,
    PollScheduler,
    SchedulerState,
    TickResult,
    TickStatus,
)
from pets_tracker.services.pricing import PriceOracle
from pets_tracker.services.trade_classification import (
    AlwaysTradeSignal,
    ITradeSignal,
    Rejected,
    RejectionReason,
    RouterAddressSignal,
    TradeClassifier,
    build_trade_signal,
)
from pets_tracker.services.trade_processing import TradeProcessorService

__all__ = [
    "AlwaysTradeSignal",
    "ExponentialBackoff",
    "ITradeSignal",
    "PollScheduler",
    "PollingRunner",
    "PriceOracle",
    "Rejected",
    "RejectionReason",
    "RouterAddressSignal",
    "SchedulerState",
    "TickResult",
    "TickStatus",
    "TradeClassifier",
    "TradeProcessorService",
    "build_trade_signal",
]
