"""Tests for the fixed-window rate limiter."""

import asyncio

import pytest

from ride_gateway.otp.rate_limiter import FixedWindowRateLimiter


@pytest.mark.asyncio
async def test_admits_up_to_capacity(rate_limiter):
    decisions = [await rate_limiter.admit("1.2.3.4") for _ in range(4)]

    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert [d.remaining for d in decisions] == [2, 1, 0, 0]
    assert 0 < decisions[-1].retry_after <= 3600


@pytest.mark.asyncio
async def test_sources_are_independent(rate_limiter):
    for _ in range(3):
        await rate_limiter.admit("1.2.3.4")

    assert not (await rate_limiter.admit("1.2.3.4")).allowed
    assert (await rate_limiter.admit("5.6.7.8")).allowed


@pytest.mark.asyncio
async def test_window_rolls_over_after_retry_after(rate_limiter, clock):
    for _ in range(3):
        await rate_limiter.admit("1.2.3.4")

    clock.advance(1)
    denied = await rate_limiter.admit("1.2.3.4")
    assert not denied.allowed

    clock.advance(denied.retry_after - 1)
    assert not (await rate_limiter.admit("1.2.3.4")).allowed

    clock.advance(1)
    fresh = await rate_limiter.admit("1.2.3.4")
    assert fresh.allowed
    assert fresh.remaining == 2


@pytest.mark.asyncio
async def test_denied_requests_do_not_extend_the_window(rate_limiter, clock):
    for _ in range(3):
        await rate_limiter.admit("1.2.3.4")

    first = await rate_limiter.admit("1.2.3.4")
    clock.advance(600)
    second = await rate_limiter.admit("1.2.3.4")

    assert second.retry_after == first.retry_after - 600


@pytest.mark.asyncio
async def test_concurrent_admissions_never_exceed_capacity(rate_limiter):
    decisions = await asyncio.gather(*(rate_limiter.admit("1.2.3.4") for _ in range(20)))

    assert sum(d.allowed for d in decisions) == 3


@pytest.mark.asyncio
async def test_limiters_do_not_share_default_storage():
    first = FixedWindowRateLimiter(max_requests=1, window_seconds=3600)
    second = FixedWindowRateLimiter(max_requests=1, window_seconds=3600)

    assert (await first.admit("1.2.3.4")).allowed
    assert (await second.admit("1.2.3.4")).allowed
