"""Exponential retry backoff with bounded jitter."""

from __future__ import annotations

import random
from dataclasses import dataclass, field


@dataclass(frozen=True)
class BackoffPolicy:
    """Compute ``2**attempt * base + U[0, jitter_ceiling)`` milliseconds.

    The policy keeps no state between calls; ``attempt`` is zero-based.
    """

    base_delay_ms: int = 2000
    jitter_ceiling_ms: int = 1000
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.base_delay_ms <= 0:
            raise ValueError("base_delay_ms must be > 0")
        if not 0 <= self.jitter_ceiling_ms < self.base_delay_ms:
            raise ValueError("jitter_ceiling_ms must be in [0, base_delay_ms)")

    def delay_ms(self, attempt: int, base_delay_ms: int | None = None) -> float:
        """Return the delay before retrying after zero-based ``attempt``."""
        if attempt < 0:
            raise ValueError("attempt must be >= 0")
        base = self.base_delay_ms if base_delay_ms is None else base_delay_ms
        return (2**attempt) * base + self.rng.random() * self.jitter_ceiling_ms
