"""
SQLAlchemy ORM model for the 'joke_ratings' table.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, SmallInteger, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JokeRatingORM(Base):
    """
    A single thumbs-up (1) or thumbs-down (-1) vote on a joke by one client.
    """
    __tablename__ = "joke_ratings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    joke_id = Column(Uuid, ForeignKey("jokes.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(100), nullable=False, comment="Opaque per-installation identifier.")
    rating = Column(SmallInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)

    joke = relationship("JokeORM", back_populates="ratings")

    __table_args__ = (
        UniqueConstraint("joke_id", "user_id", name="uq_joke_ratings_joke_user"),
        CheckConstraint("rating IN (1, -1)", name="ck_joke_ratings_rating"),
    )

    def __repr__(self) -> str:
        return f"<JokeRatingORM(joke_id={self.joke_id}, user_id='{self.user_id}', rating={self.rating})>"
