"""Client-side request pacing.

Keeps the client under its plan's request quota before the server has to
answer with HTTP 429. Uses a sliding window over the start times of the most
recent attempts.
"""

import time
import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 60
DEFAULT_TIME_WINDOW_SECONDS = 60.0

class RateLimiter:
    """Sliding window rate limiter shared by every operation of a client."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        time_window: float = DEFAULT_TIME_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initializes the rate limiter.

        Args:
            max_requests: Maximum number of requests allowed in the time window.
            time_window: The time window in seconds.
            clock: Monotonic time source, replaceable in tests.
            sleep: Non-blocking delay primitive, replaceable in tests.
        """
        if max_requests < 1:
            raise ValueError(f"max_requests must be >= 1, got {max_requests}")
        if time_window <= 0:
            raise ValueError(f"time_window must be > 0, got {time_window}")
        self.max_requests = max_requests
        self.time_window = time_window
        self._clock = clock
        self._sleep = sleep
        self._timestamps: Deque[float] = deque()
        self._lock = asyncio.Lock()
        logger.info(f"RateLimiter initialized: {max_requests} requests / {time_window} seconds")

    def _cleanup_timestamps(self, now: float) -> None:
        """Removes timestamps older than the time window."""
        while self._timestamps and now - self._timestamps[0] >= self.time_window:
            self._timestamps.popleft()

    def _wait_time(self, now: float) -> float:
        if len(self._timestamps) < self.max_requests:
            return 0.0
        return max(0.0, self._timestamps[0] + self.time_window - now)

    async def wait_for_permission(self) -> float:
        """Waits until a request is permitted, then records it.

        Returns:
            Total seconds spent waiting (0.0 when a slot was free).
        """
        waited = 0.0
        while True:
            async with self._lock:
                now = self._clock()
                self._cleanup_timestamps(now)
                wait_time = self._wait_time(now)
                if wait_time <= 0:
                    self._timestamps.append(now)
                    logger.debug("Rate limit permission granted.")
                    return waited

            # Sleep outside the lock so other tasks can re-check the window.
            logger.debug(f"Rate limit reached. Waiting for {wait_time:.2f} seconds.")
            await self._sleep(wait_time)
            waited += wait_time

    async def get_wait_time(self) -> float:
        """Estimates the time needed before the next request can be made."""
        async with self._lock:
            now = self._clock()
            self._cleanup_timestamps(now)
            return self._wait_time(now)
