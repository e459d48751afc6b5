"""OTP router — issue and verify email passcodes.

Endpoints
---------
POST /send-otp     → generate a code and email it
POST /verify-otp   → check a code and consume it
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ride_gateway.dependencies import get_state
from ride_gateway.otp.errors import ErrorKind, OTPError, RateLimited
from ride_gateway.state import GatewayState

logger = logging.getLogger(__name__)

router = APIRouter(tags=["otp"])

_STATUS_BY_KIND = {
    ErrorKind.INVALID_IDENTITY: 400,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.NOTIFICATION_FAILED: 500,
    ErrorKind.NOT_FOUND: 400,
    ErrorKind.EXPIRED: 400,
    ErrorKind.MISMATCH: 400,
}


# ── Request / response models ────────────────────────────

# Fields are left untyped so a wrong-typed email is reported by
# normalize_identity as a 400 rather than rejected by validation.

class OTPSendRequest(BaseModel):
    email: Any = None


class OTPVerifyRequest(BaseModel):
    email: Any = None
    otp: Any = None


class OTPResponse(BaseModel):
    success: bool
    message: str


# ── Error translation ────────────────────────────────────

async def otp_error_handler(request: Request, exc: OTPError) -> JSONResponse:
    """Render any :class:`OTPError` as the ``{success, message}`` envelope."""
    content: dict = {"success": False, "message": exc.message}
    headers = None
    if isinstance(exc, RateLimited):
        content["remaining"] = exc.remaining
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=_STATUS_BY_KIND[exc.kind], content=content, headers=headers
    )


def _source_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# ── Endpoints ────────────────────────────────────────────

@router.post("/send-otp", response_model=OTPResponse)
async def send_otp(
    body: OTPSendRequest,
    request: Request,
    state: GatewayState = Depends(get_state),
):
    """Issue a passcode for ``email``, rate limited per client address."""
    logger.info("Received send-otp request for email: %s", body.email)
    await state.otp_manager.issue_otp(body.email, _source_key(request))
    return OTPResponse(success=True, message="OTP sent successfully.")


@router.post("/verify-otp", response_model=OTPResponse)
async def verify_otp(
    body: OTPVerifyRequest,
    state: GatewayState = Depends(get_state),
):
    """Validate and consume the passcode for ``email``."""
    if body.otp is None or str(body.otp).strip() == "":
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Email and OTP are required."},
        )
    await state.otp_manager.verify_otp(body.email, str(body.otp))
    return OTPResponse(success=True, message="OTP verified successfully.")
