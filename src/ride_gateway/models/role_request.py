"""SQLAlchemy RoleRequest model."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from ride_gateway.models.user import Base

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"


class RoleRequest(Base):
    """A user's pending or decided request to change role.

    One row per user; a new request replaces the previous one.
    """

    __tablename__ = "role_requests"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    requested_role: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_PENDING)
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    def __repr__(self) -> str:
        return (
            f"<RoleRequest user_id={self.user_id!r} "
            f"role={self.requested_role!r} status={self.status!r}>"
        )
