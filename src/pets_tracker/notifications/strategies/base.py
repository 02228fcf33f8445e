# -*- coding: utf-8 -*-
"""Base notification sink."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from pets_tracker.config.config import Settings


class BaseNotificationStrategy(ABC):
    """Abstract delivery channel: sends one message to one subscriber channel."""

    def __init__(self, settings: "Settings"):
        """
        Args:
            settings: Global configuration (Settings).
        """
        self.settings = settings

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """Whether the sink has been initialized and not shut down."""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        pass

    @abstractmethod
    async def deliver(
        self,
        channel_id: str,
        text: str,
        media_url: str | None = None,
    ) -> None:
        """
        Deliver text (as a media caption when media_url is given) to a channel.

        Raises:
            DeliveryError: The message could not be delivered.
        """
        pass
