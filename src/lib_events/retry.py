"""BackoffPolicy — exponential delay after consecutive poll failures."""

from __future__ import annotations

import asyncio
import random


class BackoffPolicy:
    """Exponential backoff with cap and optional jitter.

    Used by the unbounded poll loop so that a failing receive call does not
    turn into a hot retry loop.
    """

    def __init__(
        self,
        *,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        jitter: bool = True,
    ) -> None:
        """Configure backoff.

        Args:
            base_delay: Delay in seconds after the first failure.
            max_delay: Cap on delay in seconds.
            jitter: If True, multiply delays by a random factor in [0.5, 1.5].
        """
        if base_delay < 0 or max_delay < 0:
            raise ValueError("base_delay and max_delay must be >= 0")
        if base_delay > max_delay:
            raise ValueError("base_delay must be <= max_delay")
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter

    def delay_for_failure(self, failures: int) -> float:
        """Return delay in seconds after *failures* consecutive failures."""
        if failures < 1:
            return 0.0
        delay = min(self.base_delay * (2 ** (failures - 1)), self.max_delay)
        if self.jitter:
            delay = delay * (0.5 + random.random())  # noqa: S311
        return float(max(0.0, delay))

    async def wait(self, failures: int) -> None:
        """Sleep for the delay that follows *failures* consecutive failures."""
        d = self.delay_for_failure(failures)
        if d > 0:
            await asyncio.sleep(d)
