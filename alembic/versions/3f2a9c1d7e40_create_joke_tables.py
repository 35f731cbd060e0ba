"""create jokes, joke_submissions and joke_ratings

Revision ID: 3f2a9c1d7e40
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "3f2a9c1d7e40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "jokes",
        sa.Column("id", sa.Uuid(), primary_key=True, comment="Unique identifier for the joke."),
        sa.Column("content", sa.Text(), nullable=False, comment="Formatted joke text."),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), comment="Creation timestamp, immutable."),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true(), comment="Soft-delete flag."),
    )
    op.create_index("idx_jokes_active_created_at", "jokes", ["is_active", "created_at"])

    op.create_table(
        "joke_submissions",
        sa.Column("id", sa.Uuid(), primary_key=True, comment="Unique identifier for the submission."),
        sa.Column("content", sa.Text(), nullable=False, comment="Raw submitted joke text."),
        sa.Column("submitted_by", sa.String(100), nullable=False, server_default="anonymous", comment="Free-text attribution."),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending", comment="Moderation status."),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), comment="Submission timestamp."),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True, comment="Review timestamp."),
        sa.Column("reviewed_by", sa.String(100), nullable=True, comment="Reviewer identity."),
        sa.Column("rejection_reason", sa.Text(), nullable=True, comment="Reason given on rejection."),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_joke_submissions_status"),
    )
    op.create_index("idx_joke_submissions_status_created_at", "joke_submissions", ["status", "created_at"])

    op.create_table(
        "joke_ratings",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("joke_id", sa.Uuid(), sa.ForeignKey("jokes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(100), nullable=False, comment="Opaque per-installation identifier."),
        sa.Column("rating", sa.SmallInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("joke_id", "user_id", name="uq_joke_ratings_joke_user"),
        sa.CheckConstraint("rating IN (1, -1)", name="ck_joke_ratings_rating"),
    )


def downgrade() -> None:
    op.drop_table("joke_ratings")
    op.drop_index("idx_joke_submissions_status_created_at", table_name="joke_submissions")
    op.drop_table("joke_submissions")
    op.drop_index("idx_jokes_active_created_at", table_name="jokes")
    op.drop_table("jokes")
