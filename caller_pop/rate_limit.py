"""Utilities for spacing out upstream calls during batch lookups."""
from __future__ import annotations

import asyncio
import time
from typing import Optional


class RateLimiter:
    """Enforces a minimum interval between call starts."""

    def __init__(self, calls_per_minute: Optional[float]) -> None:
        self._interval = 60.0 / float(calls_per_minute) if calls_per_minute else 0.0
        self._lock = asyncio.Lock()
        self._next_available = 0.0

    @property
    def interval(self) -> float:
        return self._interval

    async def acquire(self) -> None:
        if self._interval <= 0:
            return
        async with self._lock:
            now = time.monotonic()
            if now < self._next_available:
                await asyncio.sleep(self._next_available - now)
                now = time.monotonic()
            self._next_available = now + self._interval
