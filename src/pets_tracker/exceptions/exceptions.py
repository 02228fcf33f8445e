"""Custom exceptions for chain ingestion, pricing and notification delivery."""

from __future__ import annotations


class TrackerError(Exception):
    """Base exception for tracker errors."""

    pass


class ConfigurationError(TrackerError):
    """Raised at startup when a required endpoint, address or token is missing."""

    def __init__(self, setting: str, message: str | None = None) -> None:
        super().__init__(message or f"Missing required configuration: {setting}")
        self.setting = setting


class TransientNetworkError(TrackerError):
    """Raised when an upstream request fails (timeout, connection, 5xx, RPC error)."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class RateLimited(TransientNetworkError):
    """Raised when the upstream answers HTTP 429 or a JSON-RPC rate-limit error."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        url: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, url=url, status_code=429)
        self.retry_after = retry_after


class DataUnavailable(TrackerError):
    """Raised when a value cannot be extracted for one event. The event is skipped, not retried."""

    pass


class DeliveryError(TrackerError):
    """Raised by a notification sink when a message could not be delivered to a channel."""

    def __init__(
        self,
        message: str,
        *,
        channel_id: str | None = None,
        permanent: bool = False,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.channel_id = channel_id
        self.permanent = permanent
        self.cause = cause
