"""Seed script — populates the database with sample users for local testing."""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from ride_gateway.database.engine import async_session_factory, init_db
from ride_gateway.models.user import User
from ride_gateway.services.auth import TokenVerifier

SAMPLE_USERS = [
    User(uid="rider-1001", email="alice@example.com", name="Alice Johnson", fcm_token="demo-token-alice"),
    User(uid="rider-1002", email="bob@example.com", name="Bob Smith"),
    User(uid="driver-2001", email="carol@example.com", name="Carol Davis", role="driver"),
    User(uid="admin-9001", email="dan@example.com", name="Dan Wilson", role="admin"),
]


async def seed() -> None:
    """Insert sample users into the database and print a token for each."""
    await init_db()
    async with async_session_factory() as session:
        session: AsyncSession
        for user in SAMPLE_USERS:
            session.add(user)
        await session.commit()
    print(f"✅ Seeded {len(SAMPLE_USERS)} users into the database.")

    verifier = TokenVerifier()
    for user in SAMPLE_USERS:
        print(f"   {user.role:<7} {user.email:<20} Bearer {verifier.issue(user.uid)}")


if __name__ == "__main__":
    asyncio.run(seed())
