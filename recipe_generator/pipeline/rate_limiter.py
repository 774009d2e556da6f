"""Fixed-window request counter keyed by client.

The limiter is an ordinary object owned by whoever hosts it (the FastAPI app keeps one
on app.state). Its background sweep is started and stopped explicitly by the
host so stale buckets are evicted instead of growing without bound.

Fixed window, not sliding: a client can burst up to 2x max_requests across a
window boundary.
"""

import asyncio
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from recipe_generator.utils.logger import logger


@dataclass
class RateLimitEntry:
    count: int
    window_start: float


class RateLimiter:
    """Allow at most `max_requests` per client key per `window_seconds`."""

    def __init__(
        self,
        max_requests: int = 20,
        window_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the limiter.

        Args:
            max_requests: Requests allowed per key per window (default: 20).
            window_seconds: Window length in seconds (default: one hour).
            clock: Monotonic time source, injectable for tests.

        Raises:
            ValueError: If max_requests or window_seconds is not positive.
        """
        if max_requests < 1:
            raise ValueError(f"max_requests must be at least 1, got: {max_requests}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got: {window_seconds}")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        # The event loop only mutates between awaits, but CLI/worker threads may share the limiter
        self._lock = threading.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    def check(self, client_key: str) -> bool:
        """Record a request for `client_key`. Returns True if allowed, False if denied.

        Denied requests do not increment the counter.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(client_key)

            if entry is None:
                self._entries[client_key] = RateLimitEntry(count=1, window_start=now)
                return True

            if now - entry.window_start > self.window_seconds:
                entry.count = 1
                entry.window_start = now
                return True

            if entry.count >= self.max_requests:
                return False

            entry.count += 1
            return True

    def remaining(self, client_key: str) -> int:
        """Requests left for `client_key` in its current window (read-only)."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(client_key)
            if entry is None or now - entry.window_start > self.window_seconds:
                return self.max_requests
            return max(0, self.max_requests - entry.count)

    def sweep(self) -> int:
        """Evict entries whose window has expired. Returns the number evicted."""
        now = self._clock()
        with self._lock:
            expired = [
                key
                for key, entry in self._entries.items()
                if now - entry.window_start > self.window_seconds
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(f"Rate limiter sweep evicted {len(expired)} expired entries ({len(self)} remaining)")
        return len(expired)

    def reset(self) -> None:
        """Forget every client."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    async def run_sweeper(self, interval: Optional[float] = None) -> None:
        """Sweep once per `interval` (default: the window length) until cancelled."""
        interval = self.window_seconds if interval is None else interval
        while True:
            await asyncio.sleep(interval)
            self.sweep()

    def start(self, interval: Optional[float] = None) -> None:
        """Start the background sweep on the running event loop (no-op if running)."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.create_task(self.run_sweeper(interval))
        logger.debug("Rate limiter sweeper started")

    async def stop(self) -> None:
        """Cancel the background sweep and wait for it to finish."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        logger.debug("Rate limiter sweeper stopped")
