from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable


class RateLimiter:
    """Enforces a minimum spacing between call starts on one event loop."""

    def __init__(
        self,
        min_interval_s: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.min_interval_s = max(float(min_interval_s), 0.0)
        self._clock = clock
        self._sleep = sleep
        self._next_slot: float | None = None

    async def wait(self) -> float:
        """Wait for this caller's slot; returns the delay applied in seconds."""
        if self.min_interval_s <= 0:
            return 0.0

        now = self._clock()
        slot = now if self._next_slot is None else max(now, self._next_slot)
        # Reserve before suspending so concurrent callers queue behind this one.
        self._next_slot = slot + self.min_interval_s

        delay = slot - now
        if delay > 0:
            await self._sleep(delay)
        return delay
