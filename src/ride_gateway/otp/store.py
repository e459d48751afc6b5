"""In-memory OTP store with expiry and single-use semantics."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ride_gateway.core.clock import Clock, system_clock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OtpRecord:
    """A pending passcode for one identity."""

    identity: str
    code: str
    issued_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class OTPStore:
    """Async-safe in-memory OTP store.

    Each entry maps ``identity → OtpRecord``.  At most one record exists
    per identity; :meth:`put` overwrites any previous one.  All mutations
    go through a single :class:`asyncio.Lock`, and nothing awaits I/O
    while holding it.
    """

    def __init__(self, clock: Clock = system_clock) -> None:
        self._clock = clock
        self._records: dict[str, OtpRecord] = {}
        self._lock = asyncio.Lock()

    async def put(self, identity: str, code: str, ttl_seconds: float) -> OtpRecord:
        """Store *code* for *identity*, replacing any pending record."""
        issued_at = self._clock.now()
        record = OtpRecord(
            identity=identity,
            code=code,
            issued_at=issued_at,
            expires_at=issued_at + ttl_seconds,
        )
        async with self._lock:
            replaced = identity in self._records
            self._records[identity] = record
        if replaced:
            logger.info("Replaced pending OTP for %s", identity)
        return record

    async def get(self, identity: str) -> OtpRecord | None:
        async with self._lock:
            return self._records.get(identity)

    async def delete(self, identity: str) -> bool:
        """Remove the record for *identity*; return ``True`` if one existed."""
        async with self._lock:
            return self._records.pop(identity, None) is not None

    async def delete_if(self, record: OtpRecord) -> bool:
        """Remove *record* only if it is still the live one for its identity.

        Guards against a verification consuming a record that a concurrent
        issuance has already replaced.
        """
        async with self._lock:
            if self._records.get(record.identity) is record:
                del self._records[record.identity]
                return True
            return False

    async def expired_identities(self) -> list[str]:
        """Snapshot of identities whose records are past ``expires_at``."""
        now = self._clock.now()
        async with self._lock:
            return [
                identity
                for identity, record in self._records.items()
                if record.expires_at < now
            ]

    async def purge_expired(self, identities: list[str]) -> int:
        """Delete the given identities if their records are still expired.

        Records that were re-issued since the snapshot are left alone.
        """
        now = self._clock.now()
        removed = 0
        async with self._lock:
            for identity in identities:
                record = self._records.get(identity)
                if record is not None and record.expires_at < now:
                    del self._records[identity]
                    removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identity: object) -> bool:
        return identity in self._records
