"""Time source shared by the OTP store, rate limiter and relay."""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    """Anything that can report the current time in epoch seconds."""

    def now(self) -> float: ...


class SystemClock:
    """Wall-clock implementation backed by :func:`time.time`."""

    def now(self) -> float:
        return time.time()


def isoformat(timestamp: float) -> str:
    """Render an epoch timestamp as an ISO 8601 UTC string."""
    return datetime.fromtimestamp(timestamp, UTC).isoformat()


# Process-wide default clock
system_clock = SystemClock()
