"""
SQLAlchemy model for the profiles table.

The only field the debate engine cares about is is_premium, which the
payment webhook flips after a successful checkout.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from debate_room.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Base):
    """A user account's entitlement profile."""

    __tablename__ = "profiles"

    # Auth provider's user id
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<Profile id={self.id} premium={self.is_premium}>"
