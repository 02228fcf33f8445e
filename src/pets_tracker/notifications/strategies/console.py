# -*- coding: utf-8 -*-
"""Console sink (print-based), used when Telegram is disabled."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from pets_tracker.exceptions import DeliveryError
from pets_tracker.notifications.strategies.base import BaseNotificationStrategy

if TYPE_CHECKING:  # pragma: no cover
    from pets_tracker.config import Settings

_TAG_RE = re.compile(r"<[^>]+>")


class ConsoleNotifier(BaseNotificationStrategy):
    """Print notifications to stdout with HTML tags stripped."""

    def __init__(self, settings: "Settings") -> None:
        super().__init__(settings)
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def initialize(self) -> None:
        self._running = True

    async def shutdown(self) -> None:
        self._running = False

    async def deliver(self, channel_id: str, text: str, media_url: str | None = None) -> None:
        if not self.is_running:
            raise DeliveryError("console sink is not running", channel_id=channel_id)
        if not self.settings.console.enabled:
            return
        body = _TAG_RE.sub("", text)
        if media_url:
            body = f"{body}\n[media] {media_url}"
        print(f"--- to {channel_id} ---\n{body}")
