# Load environment variables early
from dotenv import load_dotenv

load_dotenv()

import asyncio
import time
from collections import defaultdict
from typing import Callable, Dict, List

from finserv.utils.debug import print__rate_limit_debug


class RateLimiter:
    """Sliding-window throttle with a short burst window, per key.

    A key names a client IP or a user id (``ip:1.2.3.4:/api/chat``). State
    is per instance: every app gets its own limiter from the service
    container, so tests never share counters.

    Instead of rejecting the moment a limit is hit, ``wait_for_capacity``
    sleeps until the oldest request leaves the window, as long as that wait
    is at most ``max_wait`` seconds.
    """

    def __init__(
        self,
        requests: int = 30,
        window: float = 60,
        burst: int = 10,
        burst_window: float = 10,
        max_wait: float = 2,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.requests = requests
        self.window = window
        self.burst = burst
        self.burst_window = burst_window
        self.max_wait = max_wait
        self._clock = clock
        self._storage: Dict[str, List[float]] = defaultdict(list)
        self._next_sweep = clock() + window
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings) -> "RateLimiter":
        return cls(
            requests=settings.rate_limit_requests,
            window=settings.rate_limit_window,
            burst=settings.rate_limit_burst,
            burst_window=settings.rate_limit_burst_window,
            max_wait=settings.rate_limit_max_wait,
        )

    def check(self, key: str) -> dict:
        """Check limits for ``key`` and return throttling information."""
        now = self._clock()
        if now >= self._next_sweep:
            self._sweep(now)

        # Clean old entries
        timestamps = [t for t in self._storage.get(key, ()) if now - t < self.window]
        if timestamps:
            self._storage[key] = timestamps
        else:
            self._storage.pop(key, None)

        recent_requests = [t for t in timestamps if now - t < self.burst_window]
        window_requests = len(timestamps)

        suggested_wait = 0.0
        if len(recent_requests) >= self.burst:
            suggested_wait = max(0.0, self.burst_window - (now - min(recent_requests)))
        elif window_requests >= self.requests:
            suggested_wait = max(0.0, self.window - (now - min(timestamps)))

        return {
            "allowed": len(recent_requests) < self.burst
            and window_requests < self.requests,
            "suggested_wait": suggested_wait,
            "burst_count": len(recent_requests),
            "window_count": window_requests,
            "burst_limit": self.burst,
            "window_limit": self.requests,
        }

    def _record(self, key: str) -> None:
        self._storage[key].append(self._clock())

    def _sweep(self, now: float) -> None:
        """Drop every key with no request inside the window."""
        stale = [
            key
            for key, timestamps in self._storage.items()
            if not timestamps or now - timestamps[-1] >= self.window
        ]
        for key in stale:
            del self._storage[key]
        self._next_sweep = now + self.window
        if stale:
            print__rate_limit_debug(f"🧹 Rate limiter dropped {len(stale)} idle keys")

    async def wait_for_capacity(self, keys: List[str], max_attempts: int = 3) -> dict:
        """Admit a request counted against every key in ``keys``.

        Returns the last rate info with ``allowed`` set to the final verdict;
        on rejection ``suggested_wait`` is the time until capacity frees up.
        """
        rate_info = {"allowed": False, "suggested_wait": 0.0}
        for attempt in range(max_attempts):
            async with self._lock:
                infos = [self.check(key) for key in keys]
                blocked = [info for info in infos if not info["allowed"]]
                if not blocked:
                    for key in keys:
                        self._record(key)
                    return {**infos[0], "allowed": True}
                rate_info = max(blocked, key=lambda info: info["suggested_wait"])

            if rate_info["suggested_wait"] <= 0:
                await asyncio.sleep(0.1)
                continue

            if rate_info["suggested_wait"] > self.max_wait:
                print__rate_limit_debug(
                    f"⚠️ Rate limit wait time ({rate_info['suggested_wait']:.1f}s) exceeds maximum ({self.max_wait}s) for {keys}"
                )
                return rate_info

            print__rate_limit_debug(
                f"⏳ Throttling request for {keys}: waiting {rate_info['suggested_wait']:.1f}s "
                f"(burst: {rate_info['burst_count']}/{rate_info['burst_limit']}, "
                f"window: {rate_info['window_count']}/{rate_info['window_limit']}, attempt {attempt + 1})"
            )
            await asyncio.sleep(rate_info["suggested_wait"])

        print__rate_limit_debug(
            f"❌ Rate limit exceeded after {max_attempts} attempts for {keys}"
        )
        return {**rate_info, "allowed": False}
