"""
Retry policy for observing ledger state after a trade.

A freshly confirmed trade is not always visible to the next balance read: the
node serving reads can lag a few slots behind. `RetryPolicy.poll` re-reads a
value until a predicate holds, bounded by an attempt count and an optional
deadline. Only reads go through this; trade submissions are never retried.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from bonding.errors import ConfigValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PollOutcome(Generic[T]):
    """Last value read, whether the predicate held, and how many reads were made."""

    value: T
    satisfied: bool
    attempts: int


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded polling policy.

    - `max_attempts`: total number of reads (>= 1).
    - `delay`: seconds to wait after an unsatisfied read.
    - `backoff`: multiplier applied to the delay after each wait (1.0 = fixed).
    - `deadline`: optional wall-clock budget in seconds for the whole poll.
    """

    max_attempts: int = 4
    delay: float = 5.0
    backoff: float = 1.0
    deadline: float | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigValidationError("max_attempts must be >= 1")
        if self.delay < 0:
            raise ConfigValidationError("delay must be >= 0")
        if self.backoff < 1.0:
            raise ConfigValidationError("backoff must be >= 1.0")
        if self.deadline is not None and self.deadline <= 0:
            raise ConfigValidationError("deadline must be positive")

    def delays(self) -> list[float]:
        """Waits between consecutive reads (one fewer than max_attempts)."""
        out: list[float] = []
        current = self.delay
        for _ in range(self.max_attempts - 1):
            out.append(current)
            current *= self.backoff
        return out

    async def poll(
        self,
        read: Callable[[], Awaitable[T]],
        until: Callable[[T], bool],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> PollOutcome[T]:
        """Read until `until(value)` holds or the attempts/deadline run out."""
        started = time.monotonic()
        waits = self.delays()
        attempt = 0
        while True:
            attempt += 1
            value = await read()
            if until(value):
                return PollOutcome(value=value, satisfied=True, attempts=attempt)
            if attempt >= self.max_attempts:
                return PollOutcome(value=value, satisfied=False, attempts=attempt)
            wait = waits[attempt - 1]
            if self.deadline is not None:
                remaining = self.deadline - (time.monotonic() - started)
                if remaining <= 0:
                    return PollOutcome(value=value, satisfied=False, attempts=attempt)
                wait = min(wait, remaining)
            logger.debug("Poll attempt %d unsatisfied, waiting %.2fs", attempt, wait)
            await sleep(wait)
