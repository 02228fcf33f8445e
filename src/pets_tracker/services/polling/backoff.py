"""Capped exponential backoff with an optional server-provided hint."""

from __future__ import annotations


class ExponentialBackoff:
    """Delays that start at ``floor`` and double (``factor``) up to ``ceiling``.

    State persists between calls until ``reset()``, so consecutive failures
    across ticks keep growing the delay.
    """

    def __init__(self, floor: float, ceiling: float, factor: float = 2.0) -> None:
        if floor <= 0:
            raise ValueError("floor must be > 0")
        if ceiling < floor:
            raise ValueError("ceiling must be >= floor")
        if factor < 1:
            raise ValueError("factor must be >= 1")
        self.floor = floor
        self.ceiling = ceiling
        self.factor = factor
        self._current = floor
        self._failures = 0

    @property
    def current(self) -> float:
        """Delay the next call to ``next_delay`` will start from."""
        return self._current

    @property
    def failures(self) -> int:
        return self._failures

    def next_delay(self, hint: float | None = None) -> float:
        """Return the delay to wait now and grow the next one.

        A larger ``hint`` (e.g. Retry-After) wins, but never beyond the ceiling.
        """
        delay = self._current
        if hint is not None and hint > delay:
            delay = hint
        delay = min(delay, self.ceiling)
        self._current = min(self._current * self.factor, self.ceiling)
        self._failures += 1
        return delay

    def reset(self) -> None:
        self._current = self.floor
        self._failures = 0
