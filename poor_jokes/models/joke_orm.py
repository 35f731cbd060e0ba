"""
SQLAlchemy ORM model for the 'jokes' table.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, true

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JokeORM(Base):
    """
    SQLAlchemy ORM model representing an approved, publicly served joke.

    Attributes:
        id (uuid.UUID): Primary key, generated by the service.
        content (str): Formatted joke text as shown to extension users.
        created_at (datetime): Timestamp when the joke was approved into the collection.
        is_active (bool): Soft-delete flag; inactive jokes are never served.
        ratings (list[JokeRatingORM]): Votes cast on this joke.
    """
    __tablename__ = "jokes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, comment="Unique identifier for the joke.")
    content = Column(Text, nullable=False, comment="Formatted joke text.")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now(), comment="Creation timestamp, immutable.")
    is_active = Column(Boolean, nullable=False, default=True, server_default=true(), comment="Soft-delete flag.")

    ratings = relationship("JokeRatingORM", back_populates="joke", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("idx_jokes_active_created_at", "is_active", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<JokeORM(id={self.id}, active={self.is_active}, content='{(self.content or '')[:40]}')>"
