"""Unit tests for the dual burst/daily rate budget."""

from __future__ import annotations

import pytest

from resources.adapters.hubspot.rate_budget import RateBudget


class _Clock:
    """Manually advanced millisecond clock."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_default_budget_refuses_at_safety_threshold() -> None:
    """A burst count equal to floor(capacity * margin) must be refused."""
    budget = RateBudget(clock=_Clock(), burst_remaining=10)

    assert budget.burst_threshold == 10
    assert budget.try_reserve() is False

    budget.observe(burst_remaining=11)
    assert budget.try_reserve() is True


def test_daily_threshold_refuses_independently_of_burst() -> None:
    """Daily exhaustion refuses even with a full burst window."""
    budget = RateBudget(clock=_Clock(), daily_remaining=50_000)

    assert budget.burst_remaining == 100
    assert budget.try_reserve() is False


def test_commits_never_drive_counters_below_zero() -> None:
    """Remaining counts stay inside [0, capacity] under any sequence."""
    budget = RateBudget(
        burst_capacity=3, daily_capacity=5, safety_margin=0.0, clock=_Clock()
    )

    for _ in range(10):
        budget.commit_reservation()

    assert budget.burst_remaining == 0
    assert budget.daily_remaining == 0
    assert budget.try_reserve() is False


def test_budget_bound_without_observation() -> None:
    """N commits with no headers leave capacity minus N remaining."""
    clock = _Clock()
    budget = RateBudget(clock=clock)
    sent = 0
    while budget.try_reserve():
        budget.commit_reservation()
        sent += 1

    assert sent == 90
    assert budget.burst_remaining == 100 - sent
    assert budget.daily_remaining == 500_000 - sent


def test_burst_window_resets_after_elapsed_window() -> None:
    """Remaining burst returns to capacity once the window has elapsed."""
    clock = _Clock(1_000.0)
    budget = RateBudget(clock=clock, burst_remaining=0)

    assert budget.try_reserve() is False

    clock.now += 9_999
    assert budget.try_reserve() is False

    clock.now += 1
    assert budget.try_reserve() is True
    assert budget.burst_remaining == 100
    assert budget.burst_window_start == clock.now


def test_observe_clamps_and_leaves_absent_values_untouched() -> None:
    """Authoritative values are clamped; missing values keep the estimate."""
    budget = RateBudget(clock=_Clock())
    budget.commit_reservation()

    budget.observe(burst_remaining=500)
    assert budget.burst_remaining == 100
    assert budget.daily_remaining == 499_999

    budget.observe(daily_remaining=-4)
    assert budget.daily_remaining == 0
    assert budget.burst_remaining == 100


def test_observe_applies_capacity_before_remaining() -> None:
    """Reported capacity changes the clamp bound for the same response."""
    budget = RateBudget(clock=_Clock())

    budget.observe(burst_capacity=190, burst_remaining=150)

    assert budget.burst_capacity == 190
    assert budget.burst_remaining == 150
    assert budget.burst_threshold == 19


def test_status_reports_percent_used() -> None:
    """Status snapshot exposes remaining counts and percent used."""
    budget = RateBudget(clock=_Clock(), burst_remaining=75, daily_remaining=250_000)

    status = budget.status()

    assert status.burst_remaining == 75
    assert status.daily_remaining == 250_000
    assert status.burst_percent_used == 25.0
    assert status.daily_percent_used == 50.0


@pytest.mark.parametrize("margin", [-0.1, 1.0, 1.5])
def test_invalid_safety_margin_is_rejected(margin: float) -> None:
    """Safety margin must lie in [0, 1)."""
    with pytest.raises(ValueError):
        RateBudget(safety_margin=margin, clock=_Clock())
