"""Periodic background sweep of expired OTP records."""

from __future__ import annotations

import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ride_gateway.otp.store import OTPStore

logger = logging.getLogger(__name__)

JOB_ID = "otp_expiry_sweep"


class ExpirySweeper:
    """Schedules the eviction of expired OTPs on the application's event loop.

    Started and stopped by the application lifespan.  Each tick deletes
    in batches of ``batch_size``, releasing the store lock between batches
    so issuance and verification are never blocked for long.
    """

    def __init__(
        self,
        store: OTPStore,
        *,
        interval: float = 60.0,
        batch_size: int = 100,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        self._store = store
        self._interval = interval
        self._batch_size = batch_size
        self._scheduler = scheduler or AsyncIOScheduler(timezone="UTC")

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        if self.running:
            return
        self._scheduler.add_job(
            self._tick,
            "interval",
            seconds=self._interval,
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info("OTP expiry sweeper started (every %ss)", self._interval)

    def stop(self) -> None:
        if not self.running:
            return
        self._scheduler.shutdown(wait=False)
        logger.info("OTP expiry sweeper stopped")

    async def run_once(self) -> int:
        """Run a single sweep pass; return the number of OTP records removed."""
        expired = await self._store.expired_identities()
        removed = 0
        for start in range(0, len(expired), self._batch_size):
            removed += await self._store.purge_expired(expired[start : start + self._batch_size])
            # Let request handlers interleave between batches
            await asyncio.sleep(0)

        if removed:
            logger.debug("Sweep removed %d expired OTPs", removed)
        return removed

    async def _tick(self) -> None:
        try:
            await self.run_once()
        except Exception:
            logger.exception("OTP expiry sweep failed; retrying next tick")
