"""Price oracle service."""

from pets_tracker.services.pricing.price_oracle import PriceOracle

__all__ = ["PriceOracle"]
