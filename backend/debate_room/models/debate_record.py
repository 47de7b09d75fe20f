"""
SQLAlchemy model for the debates table.

One row per debate. Arguments are stored as JSON lists of final arguments
(oldest first), so a saved debate can be rebuilt and continued.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from debate_room.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DebateRecord(Base):
    """A persisted debate: idea, both sides' arguments, and the verdict."""

    __tablename__ = "debates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    # Owner - None for anonymous debates
    user_id: Mapped[Optional[str]] = mapped_column(String(64), index=True, nullable=True)

    idea: Mapped[str] = mapped_column(Text)

    # Completed rounds
    rounds: Mapped[int] = mapped_column(Integer, default=0)

    advocate_arguments: Mapped[list[str]] = mapped_column(JSON, default=list)
    skeptic_arguments: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Filled in once the judge has ruled
    verdict: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    winner: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<DebateRecord id={self.id} rounds={self.rounds} idea={self.idea[:50]}...>"
