"""GitHub API rate limit tracking."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

logger = logging.getLogger(__name__)

MAX_WAIT_SECONDS = 3600


class RateLimitMonitor:
    """Tracks the primary and secondary rate limits from response headers.

    Callers await ``wait_if_needed`` before each request; the monitor sleeps
    until the reset time once the remaining quota drops to ``threshold``, or
    for ``Retry-After`` seconds after a secondary limit response.
    """

    def __init__(self, threshold: int = 10) -> None:
        self._remaining: int | None = None
        self._reset_at: float | None = None
        self._retry_after: float | None = None
        self._threshold = threshold

    def update(self, response: httpx.Response) -> None:
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset_at = response.headers.get("X-RateLimit-Reset")
        retry_after = response.headers.get("Retry-After")
        if remaining is not None:
            self._remaining = int(remaining)
        if reset_at is not None:
            self._reset_at = float(reset_at)
        if retry_after is not None and response.status_code in (403, 429):
            self._retry_after = time.time() + float(retry_after)

    def seconds_to_wait(self) -> float:
        now = time.time()
        if self._retry_after is not None and self._retry_after > now:
            return min(self._retry_after - now, MAX_WAIT_SECONDS)
        if (
            self._remaining is not None
            and self._remaining <= self._threshold
            and self._reset_at is not None
        ):
            return min(max(0, self._reset_at - now) + 1, MAX_WAIT_SECONDS)
        return 0

    async def wait_if_needed(self) -> None:
        wait_seconds = self.seconds_to_wait()
        if wait_seconds > 0:
            logger.info("rate limit exceeded, waiting %.0fs", wait_seconds)
            await asyncio.sleep(wait_seconds)
