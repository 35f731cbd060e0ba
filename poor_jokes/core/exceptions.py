"""
Error taxonomy for the poor_jokes service.

Every error carries a stable machine code and the HTTP status it maps to; the API layer
translates them into JSON error responses in one place (see poor_jokes.api.main).
Duplicate submissions are not errors, and notification failures never leave the dispatcher.
"""

from typing import List, Optional, Sequence


class JokeServiceError(Exception):
    """Base class for all domain errors raised by the service."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.message = message
        self.details: List[str] = list(details or [])


class ValidationError(JokeServiceError):
    """Raw input failed basic shape or length checks. Nothing was persisted."""

    code = "VALIDATION_ERROR"
    status_code = 400


class SubmissionNotFoundError(JokeServiceError):
    code = "NOT_FOUND"
    status_code = 404


class JokeNotFoundError(JokeServiceError):
    code = "NOT_FOUND"
    status_code = 404


class AlreadyReviewedError(JokeServiceError):
    """The submission is no longer pending; fetch fresh state before retrying."""

    code = "ALREADY_REVIEWED"
    status_code = 409


class InvalidContentError(JokeServiceError):
    """Formatting rules rejected content at approval time; `details` lists the violations."""

    code = "INVALID_CONTENT"
    status_code = 400


class DuplicateAtApprovalError(JokeServiceError):
    """The formatted joke already exists among the active jokes."""

    code = "DUPLICATE_AT_APPROVAL"
    status_code = 409

    def __init__(self, message: str, duplicate_joke_ids: Optional[Sequence[str]] = None):
        super().__init__(message, details=[str(joke_id) for joke_id in duplicate_joke_ids or []])
        self.duplicate_joke_ids = list(duplicate_joke_ids or [])


class DatastoreUnavailableError(JokeServiceError):
    """The datastore could not complete the operation. Fatal for the current request."""

    code = "DATASTORE_UNAVAILABLE"
    status_code = 503


class SubmissionConflictError(JokeServiceError):
    """
    Raised by the datastore when a conditional status update matched no row, i.e. the
    submission was not in the expected status any more.
    """

    code = "CONFLICT"
    status_code = 409

    def __init__(self, submission_id, expected_status: str):
        super().__init__(f"Submission {submission_id} is not in status '{expected_status}'")
        self.submission_id = submission_id
        self.expected_status = expected_status


class UnauthorizedError(JokeServiceError):
    """Missing or wrong admin credentials."""

    code = "UNAUTHORIZED"
    status_code = 401
