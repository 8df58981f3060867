"""
Retry policies for upload operations.

The backoff itself is tenacity's. We only pick the parameters and make
sure the caller sees the last failure, not a RetryError wrapper.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ExponentialBackoff:
    """
    Retry with exponentially growing delays.

    Defaults follow the usual exponential-backoff settings: 10 attempts,
    starting at 100ms and doubling each time, no upper bound, no jitter.
    """
    max_attempts: int = 10
    starting_delay: float = 0.1
    time_multiple: float = 2.0
    max_delay: Optional[float] = None
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.starting_delay < 0:
            raise ValueError("starting_delay cannot be negative")

    def _wait(self):
        if self.max_delay is None:
            return wait_exponential(
                multiplier=self.starting_delay,
                exp_base=self.time_multiple,
            )
        return wait_exponential(
            multiplier=self.starting_delay,
            exp_base=self.time_multiple,
            max=self.max_delay,
        )

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        # A fresh AsyncRetrying per call: it keeps per-run statistics.
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait(),
            reraise=True,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self.sleep,
        )
        return await retrying(operation)


class NoRetry:
    """Run the operation exactly once."""

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        return await operation()
