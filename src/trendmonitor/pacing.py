"""Request pacing for sequential API calls."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Protocol


class Pacer(Protocol):
    """Anything that can be awaited before an outbound request."""

    async def wait(self) -> None: ...


class NoPacer:
    """Pacer that never waits."""

    async def wait(self) -> None:
        return None


class FixedIntervalPacer:
    """Gate that keeps at least `interval` seconds between consecutive calls.

    The first call passes straight through. Every later call sleeps for whatever
    is left of the interval since the previous call returned.
    """

    def __init__(
        self,
        interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if interval < 0:
            raise ValueError(f"Invalid pacing interval: {interval!r}. Expected a non-negative number of seconds.")
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None

    async def wait(self) -> None:
        if self._last is not None:
            remaining = self._last + self.interval - self._clock()
            if remaining > 0:
                await self._sleep(remaining)
        self._last = self._clock()
