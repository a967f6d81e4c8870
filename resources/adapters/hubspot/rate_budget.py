"""Dual burst/daily request budget with a safety margin.

The budget is a local estimate of how many requests the remote API will still
accept. It is decremented for every attempted request and overwritten whenever
the API reports authoritative counters in response headers. All methods are
synchronous and never suspend, so one instance can be shared by every
coroutine on an event loop without additional locking.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Callable


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class RateBudgetStatus:
    """Point-in-time snapshot of remaining budget."""

    daily_remaining: int
    burst_remaining: int
    daily_percent_used: float
    burst_percent_used: float


@dataclass
class RateBudget:
    """Mutable token-bucket estimate for the burst window and daily quota."""

    burst_capacity: int = 100
    daily_capacity: int = 500_000
    burst_window_ms: float = 10_000
    safety_margin: float = 0.1
    clock: Callable[[], float] = field(default=_monotonic_ms, repr=False)
    burst_remaining: int = -1
    daily_remaining: int = -1
    burst_window_start: float = -1.0

    def __post_init__(self) -> None:
        if not 0 <= self.safety_margin < 1:
            raise ValueError("safety_margin must be in [0, 1)")
        if self.burst_capacity <= 0 or self.daily_capacity <= 0:
            raise ValueError("capacities must be positive")
        if self.burst_remaining < 0:
            self.burst_remaining = self.burst_capacity
        if self.daily_remaining < 0:
            self.daily_remaining = self.daily_capacity
        self.burst_remaining = _clamp(self.burst_remaining, self.burst_capacity)
        self.daily_remaining = _clamp(self.daily_remaining, self.daily_capacity)
        if self.burst_window_start < 0:
            self.burst_window_start = self.clock()

    @property
    def burst_threshold(self) -> int:
        """Burst count at or below which requests are refused."""
        return math.floor(self.burst_capacity * self.safety_margin)

    @property
    def daily_threshold(self) -> int:
        """Daily count at or below which requests are refused."""
        return math.floor(self.daily_capacity * self.safety_margin)

    def try_reserve(self) -> bool:
        """Return whether one more request fits inside both safety thresholds."""
        self._reset_burst_if_elapsed()
        if self.daily_remaining <= self.daily_threshold:
            return False
        if self.burst_remaining <= self.burst_threshold:
            return False
        return True

    def commit_reservation(self) -> None:
        """Account for one request being sent."""
        self._reset_burst_if_elapsed()
        self.daily_remaining = max(0, self.daily_remaining - 1)
        self.burst_remaining = max(0, self.burst_remaining - 1)

    def observe(
        self,
        *,
        burst_remaining: int | None = None,
        daily_remaining: int | None = None,
        burst_capacity: int | None = None,
        daily_capacity: int | None = None,
    ) -> None:
        """Overwrite local estimates with values reported by the remote API."""
        if burst_capacity is not None and burst_capacity > 0:
            self.burst_capacity = burst_capacity
            self.burst_remaining = _clamp(self.burst_remaining, burst_capacity)
        if daily_capacity is not None and daily_capacity > 0:
            self.daily_capacity = daily_capacity
            self.daily_remaining = _clamp(self.daily_remaining, daily_capacity)
        if burst_remaining is not None:
            self.burst_remaining = _clamp(burst_remaining, self.burst_capacity)
        if daily_remaining is not None:
            self.daily_remaining = _clamp(daily_remaining, self.daily_capacity)

    def status(self) -> RateBudgetStatus:
        """Return remaining counts and percent used for both budgets."""
        self._reset_burst_if_elapsed()
        return RateBudgetStatus(
            daily_remaining=self.daily_remaining,
            burst_remaining=self.burst_remaining,
            daily_percent_used=_percent_used(self.daily_remaining, self.daily_capacity),
            burst_percent_used=_percent_used(self.burst_remaining, self.burst_capacity),
        )

    def _reset_burst_if_elapsed(self) -> None:
        now = self.clock()
        if now - self.burst_window_start >= self.burst_window_ms:
            self.burst_remaining = self.burst_capacity
            self.burst_window_start = now


def _clamp(value: int, capacity: int) -> int:
    return max(0, min(int(value), capacity))


def _percent_used(remaining: int, capacity: int) -> float:
    return round((capacity - remaining) / capacity * 100, 2)
