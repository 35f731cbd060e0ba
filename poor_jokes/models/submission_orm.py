"""
SQLAlchemy ORM model for the 'joke_submissions' table.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Index, String, Text, Uuid
from sqlalchemy.sql import func

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JokeSubmissionORM(Base):
    """
    SQLAlchemy ORM model representing a user-proposed joke awaiting moderation.

    Attributes:
        id (uuid.UUID): Primary key, assigned at creation.
        content (str): Raw submitted text (trimmed, not formatted).
        submitted_by (str): Free-text attribution, "anonymous" when not given.
        status (str): One of "pending", "approved", "rejected".
        created_at (datetime): Submission timestamp, immutable.
        reviewed_at (datetime, optional): Set once, when the submission leaves "pending".
        reviewed_by (str, optional): Set once, when the submission leaves "pending".
        rejection_reason (str, optional): Set once, on rejection only.
    """
    __tablename__ = "joke_submissions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, comment="Unique identifier for the submission.")
    content = Column(Text, nullable=False, comment="Raw submitted joke text.")
    submitted_by = Column(String(100), nullable=False, default="anonymous", server_default="anonymous", comment="Free-text attribution.")
    status = Column(String(16), nullable=False, default="pending", server_default="pending", comment="Moderation status.")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now(), comment="Submission timestamp.")
    reviewed_at = Column(DateTime(timezone=True), nullable=True, comment="Review timestamp.")
    reviewed_by = Column(String(100), nullable=True, comment="Reviewer identity.")
    rejection_reason = Column(Text, nullable=True, comment="Reason given on rejection.")

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_joke_submissions_status"),
        Index("idx_joke_submissions_status_created_at", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<JokeSubmissionORM(id={self.id}, status='{self.status}', submitted_by='{self.submitted_by}')>"
