"""Exceptions subpackage."""

from pets_tracker.exceptions.exceptions import (
    ConfigurationError,
    DataUnavailable,
    DeliveryError,
    RateLimited,
    TrackerError,
    TransientNetworkError,
)

__all__ = [
    "ConfigurationError",
    "DataUnavailable",
    "DeliveryError",
    "RateLimited",
    "TrackerError",
    "TransientNetworkError",
]
