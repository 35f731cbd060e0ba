"""
Common interface for moderator notification channels and their review buttons.
"""

import logging
import uuid
from typing import Optional, Tuple

from poor_jokes.core.exceptions import (
    AlreadyReviewedError,
    DuplicateAtApprovalError,
    InvalidContentError,
    JokeServiceError,
    SubmissionNotFoundError,
)
from poor_jokes.models.dtos import ReviewAction, SubmissionDTO

logger = logging.getLogger(__name__)

# Review buttons in Telegram and Discord carry `approve_<id>` / `reject_<id>`.
APPROVE_PREFIX = "approve_"
REJECT_PREFIX = "reject_"


def parse_review_button(data: Optional[str]) -> Optional[Tuple[ReviewAction, uuid.UUID]]:
    """Split `approve_<uuid>` / `reject_<uuid>` into (ReviewAction, UUID); None if malformed."""
    for prefix, action in ((APPROVE_PREFIX, ReviewAction.APPROVE), (REJECT_PREFIX, ReviewAction.REJECT)):
        if data and data.startswith(prefix):
            try:
                return action, uuid.UUID(data[len(prefix):])
            except ValueError:
                return None
    return None


def review_refusal_text(error: JokeServiceError) -> str:
    """Short moderator-facing text for a review refused from a chat button."""
    if isinstance(error, SubmissionNotFoundError):
        return "Submission not found"
    if isinstance(error, AlreadyReviewedError):
        return "Submission already reviewed"
    if isinstance(error, InvalidContentError):
        return "Cannot approve joke with invalid content"
    if isinstance(error, DuplicateAtApprovalError):
        return "A similar joke is already live"
    return "An error occurred"


class Notifier:
    """
    A single notification channel.

    Subclasses report whether they have the configuration they need via `is_configured`;
    the dispatcher skips unconfigured channels. Delivery failures are raised, not hidden,
    so the dispatcher can log them per channel.
    """

    name: str = "notifier"

    @property
    def is_configured(self) -> bool:
        return False

    async def notify_submission_created(self, submission: SubmissionDTO) -> None:
        raise NotImplementedError

    async def notify_approved(self, submission: SubmissionDTO) -> None:
        raise NotImplementedError

    async def notify_rejected(self, submission: SubmissionDTO, reason: Optional[str] = None) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        """Release any network resources held by the channel."""
        return None
