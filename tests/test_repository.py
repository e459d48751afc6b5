"""Tests for the UserRepository and RoleRequestRepository."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ride_gateway.database.repository import RoleRequestRepository, UserRepository
from ride_gateway.models.role_request import STATUS_APPROVED, STATUS_PENDING, RoleRequest
from ride_gateway.models.user import Base, User

# ── In-memory test database ─────────────────────────────
_test_engine = create_async_engine("sqlite+aiosqlite://", echo=False)
_test_session_factory = async_sessionmaker(_test_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session():
    """Create tables in a fresh in-memory DB and yield a session."""
    async with _test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with _test_session_factory() as session:
        # Seed test data
        session.add_all(
            [
                User(uid="u-1", email="test@example.com", name="Test User", fcm_token="tok"),
                User(uid="u-2", email="other@example.com", name="Other User", role="admin"),
                User(uid="u-3", email="Mixed.Case@Example.COM", name="Mixed Case"),
            ]
        )
        await session.commit()
        yield session

    # Tear down
    async with _test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ── Users ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_find_by_email_match(db_session: AsyncSession):
    user = await UserRepository(db_session).find_by_email("  Test@Example.com")
    assert user is not None
    assert user.uid == "u-1"
    assert user.fcm_token == "tok"


@pytest.mark.asyncio
async def test_find_by_email_ignores_stored_case(db_session: AsyncSession):
    user = await UserRepository(db_session).find_by_email("mixed.case@example.com")
    assert user is not None
    assert user.uid == "u-3"


@pytest.mark.asyncio
async def test_find_by_email_no_match(db_session: AsyncSession):
    assert await UserRepository(db_session).find_by_email("nobody@example.com") is None


@pytest.mark.asyncio
async def test_get_and_set_role(db_session: AsyncSession):
    repo = UserRepository(db_session)
    user = await repo.get("u-1")
    assert user.role == "user"
    assert not user.is_admin

    await repo.set_role(user, "driver")
    await db_session.commit()
    assert (await repo.get("u-1")).role == "driver"
    assert (await repo.get("u-2")).is_admin


# ── Role requests ────────────────────────────────────────

@pytest.mark.asyncio
async def test_submit_creates_pending_request(db_session: AsyncSession):
    repo = RoleRequestRepository(db_session)
    request = await repo.submit("u-1", "driver")

    assert isinstance(request, RoleRequest)
    assert request.status == STATUS_PENDING
    assert (await repo.get("u-1")).requested_role == "driver"


@pytest.mark.asyncio
async def test_resubmit_replaces_request(db_session: AsyncSession):
    repo = RoleRequestRepository(db_session)
    first = await repo.submit("u-1", "driver")
    await repo.set_status(first, STATUS_APPROVED)

    second = await repo.submit("u-1", "admin")

    assert second.requested_role == "admin"
    assert second.status == STATUS_PENDING
