"""
Submission lifecycle state machine.

    pending --approve--> approved   (terminal)
    pending --reject---> rejected   (terminal)

Transitions are one-way and happen at most once per submission. This module only
computes the fields a transition writes; the datastore's conditional update re-checks
the `pending` precondition atomically when those fields are persisted.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from poor_jokes.core.exceptions import AlreadyReviewedError
from poor_jokes.models.dtos import SubmissionStatus

DEFAULT_REVIEWER = "admin"
DEFAULT_REJECTION_REASON = "No reason provided"

TERMINAL_STATES = frozenset({SubmissionStatus.APPROVED, SubmissionStatus.REJECTED})


def _status_of(submission: Any) -> SubmissionStatus:
    return SubmissionStatus(getattr(submission, "status"))


class SubmissionLifecycle:
    """Computes the field updates for the pending -> approved / rejected transitions."""

    def __init__(self, clock=None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def ensure_pending(self, submission: Any) -> None:
        status = _status_of(submission)
        if status in TERMINAL_STATES:
            raise AlreadyReviewedError(
                f"Submission {submission.id} has already been reviewed (status: {status.value})"
            )

    def approve(self, submission: Any, reviewer: Optional[str] = None) -> Dict[str, Any]:
        self.ensure_pending(submission)
        return {
            "status": SubmissionStatus.APPROVED.value,
            "reviewed_at": self._clock(),
            "reviewed_by": reviewer or DEFAULT_REVIEWER,
        }

    def reject(
        self,
        submission: Any,
        reviewer: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        self.ensure_pending(submission)
        return {
            "status": SubmissionStatus.REJECTED.value,
            "reviewed_at": self._clock(),
            "reviewed_by": reviewer or DEFAULT_REVIEWER,
            "rejection_reason": reason or DEFAULT_REJECTION_REASON,
        }
