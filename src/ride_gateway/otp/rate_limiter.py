"""Fixed-window rate limiter for OTP issuance, backed by ``limits``."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass

from limits import RateLimitItemPerSecond
from limits.aio import strategies
from limits.aio.storage import MemoryStorage, Storage

logger = logging.getLogger(__name__)

NAMESPACE = "otp-issue"


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of :meth:`FixedWindowRateLimiter.admit`."""

    allowed: bool
    remaining: int
    retry_after: int = 0


class FixedWindowRateLimiter:
    """Admits at most ``max_requests`` per ``source_key`` per window.

    The counter for a source lives in ``limits`` storage and expires with
    its window, so abandoned sources are evicted by the storage itself.
    Bursts are possible across a window boundary; that is acceptable for
    abuse deterrence.
    """

    def __init__(
        self,
        max_requests: int = 3,
        window_seconds: int = 3600,
        storage: Storage | None = None,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._item = RateLimitItemPerSecond(max_requests, int(window_seconds))
        self._limiter = strategies.FixedWindowRateLimiter(storage or MemoryStorage())

    async def admit(self, source_key: str) -> RateLimitDecision:
        """Count one request from *source_key* and decide whether it may proceed."""
        allowed = await self._limiter.hit(self._item, NAMESPACE, source_key)
        stats = await self._limiter.get_window_stats(self._item, NAMESPACE, source_key)

        if allowed:
            return RateLimitDecision(allowed=True, remaining=stats.remaining)

        retry_after = math.ceil(stats.reset_time - time.time())
        logger.warning("Rate limit exceeded for %s", source_key)
        return RateLimitDecision(allowed=False, remaining=0, retry_after=max(retry_after, 1))
