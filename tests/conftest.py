"""Shared fixtures — a controllable clock and a mocked notifier."""

from __future__ import annotations

import time
from unittest.mock import AsyncMock

import pytest

from ride_gateway.otp.manager import OTPManager
from ride_gateway.otp.rate_limiter import FixedWindowRateLimiter
from ride_gateway.otp.store import OTPStore

T0 = 1_700_000_000.0


class ManualClock:
    """Clock whose time only moves when a test says so."""

    def __init__(self, start: float = T0) -> None:
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def notifier():
    """Mocked notifier — records the codes it was asked to send."""
    mock = AsyncMock()
    mock.send_otp = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def store(clock) -> OTPStore:
    return OTPStore(clock=clock)


@pytest.fixture
def rate_limiter(clock, monkeypatch) -> FixedWindowRateLimiter:
    # limits' memory storage reads time.time() for window expiry
    monkeypatch.setattr(time, "time", clock.now)
    return FixedWindowRateLimiter(max_requests=3, window_seconds=3600)


@pytest.fixture
def manager(store, rate_limiter, notifier, clock) -> OTPManager:
    return OTPManager(
        store,
        rate_limiter,
        notifier,
        ttl_seconds=600,
        notifier_timeout=0.5,
        clock=clock,
    )


def sent_code(notifier) -> str:
    """The code passed to the most recent ``send_otp`` call."""
    return notifier.send_otp.await_args.args[1]
