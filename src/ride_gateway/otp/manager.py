"""OTP manager — orchestrates issuance and verification.

Issuance order
--------------
1. Validate and normalise the identity (an email address).
2. Ask the rate limiter to admit the requesting source.
3. Generate a 6-digit code and hand it to the notifier, outside any lock.
4. Only once the notifier succeeds, store the record (overwriting any
   pending one).

A notifier failure or timeout therefore never leaves a stale record behind.
"""

from __future__ import annotations

import asyncio
import logging
import re
import secrets
from typing import Protocol

from ride_gateway.core.clock import Clock, system_clock
from ride_gateway.otp.errors import (
    Expired,
    InvalidIdentity,
    Mismatch,
    NotFound,
    NotificationFailed,
    RateLimited,
)
from ride_gateway.otp.rate_limiter import FixedWindowRateLimiter
from ride_gateway.otp.store import OTPStore, OtpRecord

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

OTP_MIN = 100000
OTP_MAX = 999999


class Notifier(Protocol):
    """Delivers a passcode to its owner (email, SMS, …)."""

    async def send_otp(self, identity: str, code: str) -> None:
        """Send *code* to *identity*; raise on any delivery failure."""


def normalize_identity(identity: object) -> str:
    """Return the canonical form of an email identity.

    Raises :class:`InvalidIdentity` if it is empty or malformed.
    """
    if identity is not None and not isinstance(identity, str):
        raise InvalidIdentity()
    candidate = (identity or "").strip().lower()
    if not candidate or not EMAIL_PATTERN.match(candidate):
        raise InvalidIdentity()
    return candidate


def generate_code() -> str:
    """Uniform 6-digit numeric code in ``[100000, 999999]``."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


class OTPManager:
    """Issues and verifies one-time passcodes bound to an email identity."""

    def __init__(
        self,
        store: OTPStore,
        rate_limiter: FixedWindowRateLimiter,
        notifier: Notifier,
        *,
        ttl_seconds: float = 600,
        notifier_timeout: float = 10.0,
        clock: Clock = system_clock,
    ) -> None:
        self._store = store
        self._rate_limiter = rate_limiter
        self._notifier = notifier
        self._ttl_seconds = ttl_seconds
        self._notifier_timeout = notifier_timeout
        self._clock = clock

    async def issue_otp(self, identity: str, source_key: str) -> OtpRecord:
        """Generate, deliver and store a fresh code for *identity*.

        Returns the stored record.  Raises :class:`InvalidIdentity`,
        :class:`RateLimited` or :class:`NotificationFailed`.
        """
        identity = normalize_identity(identity)

        decision = await self._rate_limiter.admit(source_key)
        if not decision.allowed:
            raise RateLimited(retry_after=decision.retry_after)

        code = generate_code()
        try:
            await asyncio.wait_for(
                self._notifier.send_otp(identity, code),
                timeout=self._notifier_timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("Notifier timed out sending OTP to %s", identity)
            raise NotificationFailed() from exc
        except Exception as exc:
            logger.exception("Failed to send OTP to %s", identity)
            raise NotificationFailed() from exc

        record = await self._store.put(identity, code, self._ttl_seconds)
        logger.info("OTP sent to %s", identity)
        return record

    async def verify_otp(self, identity: str, candidate_code: str) -> None:
        """Check *candidate_code* against the pending record for *identity*.

        Success consumes the record.  Raises :class:`NotFound`,
        :class:`Expired` or :class:`Mismatch`; a mismatch leaves the record
        in place so the user can retry until it expires.
        """
        identity = normalize_identity(identity)

        record = await self._store.get(identity)
        if record is None:
            logger.info("No OTP record found for %s", identity)
            raise NotFound()

        if record.is_expired(self._clock.now()):
            await self._store.delete_if(record)
            logger.info("OTP expired for %s", identity)
            raise Expired()

        candidate = str(candidate_code).strip()
        if not secrets.compare_digest(candidate.encode(), record.code.encode()):
            logger.info("Invalid OTP entered for %s", identity)
            raise Mismatch()

        if not await self._store.delete_if(record):
            # Consumed or replaced by a concurrent request since the lookup
            logger.info("OTP for %s was consumed concurrently", identity)
            raise NotFound()

        logger.info("OTP verified successfully for %s", identity)
