"""GitHub API rate limit monitoring."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

logger = logging.getLogger(__name__)


class RateLimitMonitor:
    """Tracks X-RateLimit-* headers and pauses before the quota runs out."""

    def __init__(self, threshold: int = 10, max_wait: float = 3600) -> None:
        self._remaining: int | None = None
        self._reset_at: float | None = None
        self._threshold = threshold
        self._max_wait = max_wait

    @property
    def remaining(self) -> int | None:
        return self._remaining

    def update(self, response: httpx.Response) -> None:
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset_at = response.headers.get("X-RateLimit-Reset")
        if remaining is not None:
            self._remaining = int(remaining)
        if reset_at is not None:
            self._reset_at = float(reset_at)

    def seconds_until_reset(self) -> float:
        """Seconds to sleep before the next request, 0 when under no pressure."""
        if (
            self._remaining is None
            or self._remaining > self._threshold
            or self._reset_at is None
        ):
            return 0.0
        wait_seconds = max(0.0, self._reset_at - time.time()) + 1
        return min(wait_seconds, self._max_wait)

    async def wait_if_needed(self) -> None:
        wait_seconds = self.seconds_until_reset()
        if wait_seconds > 0:
            logger.warning(
                "Rate limit low (%d left), sleeping %.0fs until reset",
                self._remaining,
                wait_seconds,
            )
            await asyncio.sleep(wait_seconds)
