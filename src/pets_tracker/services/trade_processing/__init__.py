"""Trade processing: event -> recorded trade -> notification."""

from pets_tracker.services.trade_processing.trade_processor import (
    TradeNotifier,
    TradeProcessorService,
)

__all__ = ["TradeNotifier", "TradeProcessorService"]
