import asyncio
import time


class RateLimiter:
    """Minimum-interval limiter shared by all calls on one client.

    max_rps <= 0 disables limiting.
    """

    def __init__(self, max_rps: float) -> None:
        self._min_interval = 1.0 / max_rps if max_rps > 0 else 0.0
        self._next_slot = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        if not self._min_interval:
            return
        async with self._lock:
            wait = self._next_slot - time.monotonic()
            if wait > 0:
                await asyncio.sleep(wait)
            self._next_slot = time.monotonic() + self._min_interval
