"""Bearer-token verification for authenticated endpoints."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from ride_gateway.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class TokenVerifier:
    """Decodes signed JWTs issued by the identity provider.

    The ``sub`` claim carries the user's uid.
    """

    def __init__(self, config: Settings | None = None) -> None:
        self._config = config or default_settings

    def verify(self, token: str) -> dict[str, Any] | None:
        """Return the token claims, or ``None`` if the token is invalid."""
        try:
            payload = jwt.decode(
                token, self._config.jwt_secret, algorithms=[self._config.jwt_algorithm]
            )
        except JWTError as exc:
            logger.warning("JWT decode failed: %s", exc)
            return None
        if not payload.get("sub"):
            return None
        return payload

    def issue(self, uid: str, expires_in: timedelta = timedelta(hours=1)) -> str:
        """Create a token for *uid* (used by tooling and tests)."""
        claims = {"sub": uid, "exp": datetime.now(UTC) + expires_in}
        return jwt.encode(claims, self._config.jwt_secret, algorithm=self._config.jwt_algorithm)
