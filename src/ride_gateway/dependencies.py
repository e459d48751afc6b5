"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, status
from fastapi.requests import HTTPConnection
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ride_gateway.database.repository import UserRepository
from ride_gateway.models.user import User
from ride_gateway.state import GatewayState

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


def get_state(conn: HTTPConnection) -> GatewayState:
    return conn.app.state.gateway


async def get_db_session(
    state: GatewayState = Depends(get_state),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session, committing on success and rolling back on error."""
    async with state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_current_uid(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    state: GatewayState = Depends(get_state),
) -> str:
    """Resolve the bearer token to the caller's uid."""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    claims = state.token_verifier.verify(credentials.credentials)
    if claims is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return claims["sub"]


async def require_admin(
    uid: str = Depends(get_current_uid),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    """Ensure the caller is a user with the admin role."""
    user = await UserRepository(session).get(uid)
    if user is None or not user.is_admin:
        logger.info("Unauthorized admin action attempted by %s", uid)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
