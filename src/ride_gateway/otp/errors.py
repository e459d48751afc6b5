"""OTP error taxonomy — every failure the issue/verify paths can report."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_IDENTITY = "invalid_identity"
    RATE_LIMITED = "rate_limited"
    NOTIFICATION_FAILED = "notification_failed"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


class OTPError(Exception):
    """Base class for recoverable OTP failures.

    ``message`` is safe to show to the caller.
    """

    kind: ErrorKind
    message: str = "OTP request failed."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ── Issuance path ────────────────────────────────────────

class InvalidIdentity(OTPError):
    kind = ErrorKind.INVALID_IDENTITY
    message = "Invalid or missing email address."


class RateLimited(OTPError):
    """Raised when the requesting source has exhausted its window."""

    kind = ErrorKind.RATE_LIMITED
    message = "Too many requests from this IP, please try again in an hour."

    def __init__(self, retry_after: int, message: str | None = None) -> None:
        self.retry_after = retry_after
        self.remaining = 0
        super().__init__(message)


class NotificationFailed(OTPError):
    kind = ErrorKind.NOTIFICATION_FAILED
    message = "Failed to send OTP. Please try again."


# ── Verification path ────────────────────────────────────

class NotFound(OTPError):
    kind = ErrorKind.NOT_FOUND
    message = "No OTP found for this email."


class Expired(OTPError):
    kind = ErrorKind.EXPIRED
    message = "OTP has expired."


class Mismatch(OTPError):
    kind = ErrorKind.MISMATCH
    message = "Invalid OTP."
