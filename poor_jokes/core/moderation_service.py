"""
Moderation service: the submit and review operations that tie the core together.

    submit:  normalize -> duplicate check -> persist pending submission -> notify
    review:  load -> lifecycle precondition -> (approve: format, re-check duplicates)
             -> conditional status update (+ joke insert, one transaction) -> notify
"""

import logging
import uuid
from typing import List, Optional

from poor_jokes.core.duplicate_detector import DuplicateDetector
from poor_jokes.core.exceptions import (
    AlreadyReviewedError,
    DuplicateAtApprovalError,
    InvalidContentError,
    JokeNotFoundError,
    SubmissionConflictError,
    SubmissionNotFoundError,
    ValidationError,
)
from poor_jokes.core.formatter import (
    DEFAULT_MAX_LENGTH,
    DEFAULT_MIN_LENGTH,
    format_joke_content,
    validate_joke_quality,
)
from poor_jokes.core.lifecycle import SubmissionLifecycle
from poor_jokes.models.dtos import (
    JokeDTO,
    ReviewAction,
    ReviewResult,
    ReviewSubmissionRequest,
    SubmissionDTO,
    SubmissionStatus,
    SubmitJokeRequest,
    SubmitJokeResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_SUBMITTER = "anonymous"
DUPLICATE_MESSAGE = "This joke is already in our collection or waiting for review. Thanks anyway!"
SUBMITTED_MESSAGE = "Joke submitted successfully! It will be reviewed before being added."


class ModerationService:
    """
    Orchestrates joke submission and moderator review.

    Args:
        datastore: A JokeDatastore implementation.
        dispatcher: NotificationDispatcher (or anything exposing the same notify_* methods).
        detector: DuplicateDetector; defaults to the 0.90 threshold.
        lifecycle: SubmissionLifecycle; defaults to one using `clock`.
        min_length: Minimum formatted joke length at approval.
        max_length: Maximum formatted joke length at approval.
        max_submission_length: Maximum raw submission length after trimming.
        clock: Zero-argument callable returning an aware datetime.
    """

    def __init__(
        self,
        datastore,
        dispatcher,
        detector: Optional[DuplicateDetector] = None,
        lifecycle: Optional[SubmissionLifecycle] = None,
        min_length: int = DEFAULT_MIN_LENGTH,
        max_length: int = DEFAULT_MAX_LENGTH,
        max_submission_length: int = DEFAULT_MAX_LENGTH,
        clock=None,
    ):
        self.datastore = datastore
        self.dispatcher = dispatcher
        self.detector = detector or DuplicateDetector()
        self.lifecycle = lifecycle or SubmissionLifecycle(clock=clock)
        self.min_length = min_length
        self.max_length = max_length
        self.max_submission_length = max_submission_length

    async def submit(self, request: SubmitJokeRequest) -> SubmitJokeResponse:
        """
        Accept a joke from an end user.

        Duplicates get a success-shaped response with `duplicate_detected=True` and
        nothing is written.

        Raises:
            ValidationError: content empty after trimming or longer than allowed.
            DatastoreUnavailableError: the submission could not be persisted.
        """
        content = (request.content or "").strip()
        if not content:
            raise ValidationError("Joke content is required", details=["content must not be empty"])
        if len(content) > self.max_submission_length:
            raise ValidationError(
                f"Joke is too long (max {self.max_submission_length} characters)",
                details=[f"content has {len(content)} characters"],
            )

        check = await self.detector.check(content, self.datastore)
        if check.check_failed:
            logger.warning("Accepting submission without a duplicate check (datastore read failed)")
        if check.is_duplicate:
            logger.info(
                f"Duplicate submission ignored ({check.match_type} match, "
                f"{len(check.matching_jokes)} jokes, {len(check.matching_submissions)} pending)"
            )
            return SubmitJokeResponse(
                success=True,
                message=DUPLICATE_MESSAGE,
                submission_id=None,
                duplicate_detected=True,
            )

        submission = await self.datastore.create_submission(
            content, request.submitted_by or DEFAULT_SUBMITTER
        )
        logger.info(f"New submission {submission.id} from '{submission.submitted_by}'")
        self.dispatcher.notify_submission_created(submission)

        return SubmitJokeResponse(success=True, message=SUBMITTED_MESSAGE, submission_id=submission.id)

    async def review(self, request: ReviewSubmissionRequest) -> ReviewResult:
        """
        Approve or reject a pending submission.

        Raises:
            SubmissionNotFoundError: unknown submission id.
            AlreadyReviewedError: the submission is not pending, or another review won the race.
            InvalidContentError: approval blocked by formatting rules.
            DuplicateAtApprovalError: the formatted joke already exists among active jokes.
        """
        submission = await self.datastore.get_submission(request.submission_id)
        if submission is None:
            raise SubmissionNotFoundError(f"Submission {request.submission_id} not found")

        if request.action == ReviewAction.APPROVE:
            return await self._approve(submission, request.reviewed_by)
        return await self._reject(submission, request.reviewed_by, request.rejection_reason)

    async def _approve(self, submission: SubmissionDTO, reviewer: Optional[str]) -> ReviewResult:
        self.lifecycle.ensure_pending(submission)

        result = format_joke_content(submission.content, self.min_length, self.max_length)
        if not result.is_valid:
            raise InvalidContentError("Joke content failed validation", details=result.errors)

        quality = validate_joke_quality(result.formatted)
        logger.info(
            f"Quality for submission {submission.id}: {quality.score}/{quality.max_score} "
            f"({quality.percentage}%)"
        )

        fields = self.lifecycle.approve(submission, reviewer)
        # Status is claimed before the duplicate check; a DuplicateAtApprovalError rolls it back.
        try:
            async with self.datastore.transaction() as tx:
                updated = await tx.update_submission_status(submission.id, SubmissionStatus.PENDING, fields)
                duplicates = self.detector.find_duplicates(result.formatted, await tx.list_active_jokes(), [])
                if duplicates.is_duplicate:
                    raise DuplicateAtApprovalError(
                        "An identical or very similar joke is already active",
                        duplicate_joke_ids=[joke.id for joke in duplicates.matching_jokes],
                    )
                joke = await tx.create_joke(result.formatted)
        except SubmissionConflictError as e:
            raise AlreadyReviewedError(f"Submission {submission.id} has already been reviewed") from e

        logger.info(f"Submission {submission.id} approved by {updated.reviewed_by} as joke {joke.id}")
        self.dispatcher.notify_approved(updated)

        return ReviewResult(
            success=True,
            message="Joke approved and added to the collection",
            submission_id=updated.id,
            status=SubmissionStatus.APPROVED,
            reviewed_by=updated.reviewed_by,
            reviewed_at=updated.reviewed_at,
            joke_id=joke.id,
            formatted_content=result.formatted,
        )

    async def _reject(
        self,
        submission: SubmissionDTO,
        reviewer: Optional[str],
        reason: Optional[str],
    ) -> ReviewResult:
        fields = self.lifecycle.reject(submission, reviewer, reason)
        try:
            updated = await self.datastore.update_submission_status(
                submission.id, SubmissionStatus.PENDING, fields
            )
        except SubmissionConflictError as e:
            raise AlreadyReviewedError(f"Submission {submission.id} has already been reviewed") from e

        logger.info(f"Submission {submission.id} rejected by {updated.reviewed_by}: {updated.rejection_reason}")
        self.dispatcher.notify_rejected(updated, updated.rejection_reason)

        return ReviewResult(
            success=True,
            message="Joke rejected",
            submission_id=updated.id,
            status=SubmissionStatus.REJECTED,
            reviewed_by=updated.reviewed_by,
            reviewed_at=updated.reviewed_at,
            rejection_reason=updated.rejection_reason,
        )

    async def list_submissions(self, status: Optional[SubmissionStatus] = None) -> List[SubmissionDTO]:
        return await self.datastore.list_submissions(status)

    async def list_jokes(self) -> List[JokeDTO]:
        return await self.datastore.list_active_jokes()

    async def deactivate_joke(self, joke_id: uuid.UUID) -> JokeDTO:
        joke = await self.datastore.deactivate_joke(joke_id)
        if joke is None:
            raise JokeNotFoundError(f"Active joke {joke_id} not found")
        logger.info(f"Joke {joke_id} deactivated")
        return joke
