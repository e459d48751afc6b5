"""Repositories — data access layer for users and role requests."""

from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ride_gateway.models.role_request import STATUS_PENDING, RoleRequest
from ride_gateway.models.user import User


class UserRepository:
    """Encapsulates all database queries related to users."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, uid: str) -> User | None:
        return await self._session.get(User, uid)

    async def find_by_email(self, email: str) -> User | None:
        """Look up a user by email address (case-insensitive)."""
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def set_role(self, user: User, role: str) -> User:
        user.role = role
        await self._session.flush()
        return user


class RoleRequestRepository:
    """Queries and upserts for role-change requests."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str) -> RoleRequest | None:
        return await self._session.get(RoleRequest, user_id)

    async def submit(self, user_id: str, role: str) -> RoleRequest:
        """Create or replace the pending request for *user_id*."""
        request = await self.get(user_id)
        if request is None:
            request = RoleRequest(user_id=user_id, requested_role=role)
            self._session.add(request)
        else:
            request.requested_role = role
            request.requested_at = datetime.now(UTC)
        request.status = STATUS_PENDING
        await self._session.flush()
        return request

    async def set_status(self, request: RoleRequest, status: str) -> RoleRequest:
        request.status = status
        await self._session.flush()
        return request
