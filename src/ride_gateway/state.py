"""Gateway state — the service objects owned by one running application."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ride_gateway.config import Settings, settings as default_settings
from ride_gateway.core.clock import Clock, system_clock
from ride_gateway.otp.manager import Notifier, OTPManager
from ride_gateway.otp.rate_limiter import FixedWindowRateLimiter
from ride_gateway.otp.store import OTPStore
from ride_gateway.otp.sweeper import ExpirySweeper
from ride_gateway.relay.registry import RoomRegistry
from ride_gateway.relay.relay import Relay
from ride_gateway.services.auth import TokenVerifier
from ride_gateway.services.push_service import PushSender


@dataclass
class GatewayState:
    """Everything request handlers need, built once per application."""

    otp_store: OTPStore
    rate_limiter: FixedWindowRateLimiter
    otp_manager: OTPManager
    sweeper: ExpirySweeper
    relay: Relay
    push_sender: PushSender
    token_verifier: TokenVerifier
    session_factory: async_sessionmaker[AsyncSession]


def build_state(
    *,
    notifier: Notifier,
    push_sender: PushSender,
    session_factory: async_sessionmaker[AsyncSession],
    token_verifier: TokenVerifier | None = None,
    clock: Clock = system_clock,
    config: Settings | None = None,
) -> GatewayState:
    """Wire the OTP and relay subsystems around the given collaborators."""
    config = config or default_settings

    store = OTPStore(clock=clock)
    rate_limiter = FixedWindowRateLimiter(
        max_requests=config.otp_rate_limit_max,
        window_seconds=config.otp_rate_limit_window_seconds,
    )
    manager = OTPManager(
        store,
        rate_limiter,
        notifier,
        ttl_seconds=config.otp_ttl_seconds,
        notifier_timeout=config.notifier_timeout_seconds,
        clock=clock,
    )
    sweeper = ExpirySweeper(
        store,
        interval=config.otp_sweep_interval_seconds,
        batch_size=config.otp_sweep_batch_size,
    )
    return GatewayState(
        otp_store=store,
        rate_limiter=rate_limiter,
        otp_manager=manager,
        sweeper=sweeper,
        relay=Relay(RoomRegistry(), clock=clock),
        push_sender=push_sender,
        token_verifier=token_verifier or TokenVerifier(config),
        session_factory=session_factory,
    )
