"""
Concurrency limiter bounding how many probes are in flight at once.
Admission is roughly FIFO (asyncio.Semaphore); in_flight and peak are kept
for instrumentation.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from core.errors import ConfigError


class ConcurrencyLimiter:
    def __init__(self, limit: int):
        if limit <= 0:
            raise ConfigError(f"concurrency limit must be > 0, got {limit}")
        self.limit = limit
        self.in_flight = 0
        self.peak = 0
        self.admitted = 0
        self._sem = asyncio.Semaphore(limit)

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        async with self._sem:
            self.in_flight += 1
            self.admitted += 1
            if self.in_flight > self.peak:
                self.peak = self.in_flight
            try:
                yield
            finally:
                self.in_flight -= 1

    @property
    def available(self) -> int:
        return self.limit - self.in_flight
