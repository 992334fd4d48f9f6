"""Backoff strategies for retried backend calls.

- ExponentialBackoff: capped exponential growth plus additive jitter
- ConstantBackoff: fixed delay (tests, rate-limited deployments)
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff delay calculation.

    Attempt numbers are 0-indexed (delay before the first retry = attempt 0).
    """

    def delay(self, attempt: int) -> float:
        """Delay in seconds before the retry following `attempt`."""
        ...


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Exponential backoff with additive jitter.

    Delay = min(base * (multiplier ^ attempt), max_delay) + uniform(0, jitter_max)

    The cap applies before jitter, so the largest possible delay is
    max_delay + jitter_max.

    Attributes:
        base: Initial delay in seconds (default: 1.0)
        max_delay: Cap on the exponential part in seconds (default: 10.0)
        multiplier: Exponential growth factor (default: 2.0)
        jitter_max: Upper bound of the random addend in seconds (default: 0.2)
        rng: Source of uniform [0, 1) samples
    """

    base: float = 1.0
    max_delay: float = 10.0
    multiplier: float = 2.0
    jitter_max: float = 0.2
    rng: Callable[[], float] = field(default=random.random, repr=False, compare=False)

    def base_delay(self, attempt: int) -> float:
        """Delay without jitter."""
        return min(self.base * (self.multiplier ** attempt), self.max_delay)

    def delay(self, attempt: int) -> float:
        d = self.base_delay(attempt)
        return d + self.rng() * self.jitter_max if self.jitter_max > 0 else d


@dataclass(frozen=True, slots=True)
class ConstantBackoff:
    """Fixed delay between retries.

    Attributes:
        delay_seconds: Fixed delay in seconds (default: 1.0)
    """

    delay_seconds: float = 1.0

    def delay(self, attempt: int) -> float:
        return self.delay_seconds
