"""SQLAlchemy User model."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""


ROLE_USER = "user"
ROLE_DRIVER = "driver"
ROLE_ADMIN = "admin"

# Roles a user may ask to be promoted to
REQUESTABLE_ROLES = (ROLE_DRIVER, ROLE_ADMIN)


class User(Base):
    """A registered rider, driver or admin.

    ``uid`` is the identity provider's subject id; it is what bearer
    tokens carry.
    """

    __tablename__ = "users"

    uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_USER)
    fcm_token: Mapped[str | None] = mapped_column(
        String(512), nullable=True, doc="Device token for push notifications"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    __table_args__ = (
        Index("ix_users_email", "email"),
        Index("ix_users_role", "role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<User uid={self.uid!r} email={self.email!r} role={self.role!r}>"
