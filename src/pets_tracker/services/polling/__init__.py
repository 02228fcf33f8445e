"""Per-chain polling: backoff, scheduler state machine and runner."""

from pets_tracker.services.polling.backoff import ExponentialBackoff
from pets_tracker.services.polling.poll_scheduler import (
    PollScheduler,
    SchedulerState,
    TickResult,
    TickStatus,
)
from pets_tracker.services.polling.polling_runner import PollingRunner

__all__ = [
    "ExponentialBackoff",
    "PollScheduler",
    "PollingRunner",
    "SchedulerState",
    "TickResult",
    "TickStatus",
]
