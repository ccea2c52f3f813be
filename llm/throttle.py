"""Minimum-interval gate between outbound requests."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Optional


class RequestThrottle:
    """Keep consecutive requests at least ``min_interval`` seconds apart.

    The timestamp is recorded when ``wait`` returns, i.e. right before the
    request goes out, so spacing is measured request-to-request regardless
    of how long each request takes. Two coroutines racing on the same gate
    both read the same timestamp; spacing is then only approximate.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self.last_request_time: Optional[float] = None

    async def wait(self) -> float:
        """Suspend until the interval has elapsed. Returns the delay applied."""
        delay = 0.0
        if self.last_request_time is not None:
            elapsed = self._clock() - self.last_request_time
            if elapsed < self.min_interval:
                delay = self.min_interval - elapsed
                sleep = self._sleep or asyncio.sleep
                await sleep(delay)
        self.last_request_time = self._clock()
        return delay
