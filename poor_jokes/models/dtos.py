"""
Pydantic Data Transfer Objects (DTOs) for the poor_jokes service.

These models are used for API request/response validation and internal data transfer.
"""

import enum
import uuid
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class SubmissionStatus(str, enum.Enum):
    """Moderation status of a joke submission."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewAction(str, enum.Enum):
    """Decision a moderator can take on a pending submission."""
    APPROVE = "approve"
    REJECT = "reject"


class JokeDTO(BaseModel):
    """
    DTO for an active joke as served to the extension.

    Vote counters are derived from the joke_ratings table at read time.
    """
    id: uuid.UUID
    content: str
    created_at: datetime
    is_active: bool = True
    up_votes: int = 0
    down_votes: int = 0
    total_votes: int = 0
    rating_percentage: int = 0

    model_config = {"from_attributes": True}


class JokeRatingDTO(BaseModel):
    """
    DTO for a single vote on a joke.
    """
    id: uuid.UUID
    joke_id: uuid.UUID
    user_id: str
    rating: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SubmissionDTO(BaseModel):
    """
    DTO for a joke submission.

    Mirrors JokeSubmissionORM.
    """
    id: uuid.UUID
    content: str
    submitted_by: str = "anonymous"
    status: SubmissionStatus = SubmissionStatus.PENDING
    created_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    rejection_reason: Optional[str] = None

    model_config = {"from_attributes": True}


class SubmitJokeRequest(BaseModel):
    """
    Request body for POST /api/jokes.

    Content length is enforced by the moderation service against the configured limits.
    """
    content: str = Field(..., description="Raw joke text as typed by the user.")
    submitted_by: Optional[str] = Field(None, max_length=100, description="Optional attribution.")

    @field_validator("submitted_by")
    @classmethod
    def blank_submitter_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class SubmitJokeResponse(BaseModel):
    success: bool = True
    message: str
    submission_id: Optional[uuid.UUID] = None
    duplicate_detected: bool = False


class ReviewSubmissionRequest(BaseModel):
    """
    Request body for POST /api/submissions (admin only).
    """
    submission_id: uuid.UUID
    action: ReviewAction
    rejection_reason: Optional[str] = Field(None, max_length=500)
    reviewed_by: Optional[str] = Field(None, max_length=100)


class ReviewResult(BaseModel):
    """
    Outcome of a successful review.
    """
    success: bool = True
    message: str
    submission_id: uuid.UUID
    status: SubmissionStatus
    reviewed_by: str
    reviewed_at: datetime
    joke_id: Optional[uuid.UUID] = None
    formatted_content: Optional[str] = None
    rejection_reason: Optional[str] = None


class JokeListResponse(BaseModel):
    success: bool = True
    jokes: List[JokeDTO]


class SubmissionListResponse(BaseModel):
    success: bool = True
    submissions: List[SubmissionDTO]


class RateJokeRequest(BaseModel):
    """
    Request body for POST /api/rate.
    """
    joke_id: uuid.UUID
    user_id: str = Field(..., min_length=1, max_length=100)
    rating: Literal[1, -1]


class RateJokeResponse(BaseModel):
    success: bool = True
    action: Literal["added", "updated", "removed"]
    message: str


class DeactivateJokeRequest(BaseModel):
    joke_id: uuid.UUID


class DeactivateJokeResponse(BaseModel):
    success: bool = True
    message: str
    joke: JokeDTO


class FormatResult(BaseModel):
    """
    Output of the joke content formatter.

    `formatted` is always populated with the best-effort transformed text, even when
    `is_valid` is False, so callers can show what would have been stored.
    """
    formatted: str
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    original_length: int = 0
    formatted_length: int = 0
    word_count: int = 0


class QualityReport(BaseModel):
    """
    Advisory quality heuristics for an approved joke. Never blocks approval.
    """
    has_question: bool
    has_punctuation: bool
    has_common_words: bool
    reasonable_length: bool
    has_variety: bool
    not_repetitive: bool
    score: int
    max_score: int
    percentage: int
    is_high_quality: bool


class DuplicateJokeDetail(BaseModel):
    id: uuid.UUID
    content: str
    created_at: datetime


class DeduplicationReport(BaseModel):
    success: bool = True
    message: str = ""
    total_jokes: int = 0
    unique_jokes: int = 0
    duplicates_removed: int = 0
    duplicate_details: List[DuplicateJokeDetail] = Field(default_factory=list)
    duplicate_submissions_removed: int = 0
    submissions_checked: bool = True


class JokeCandidate(BaseModel):
    """
    One joke proposed by the AI generator, as returned by the model.
    """
    content: str
    category: str = "pun"
    quality_score: float = Field(..., ge=0.0, le=1.0)


class DailyGenerationReport(BaseModel):
    success: bool = True
    message: str = ""
    submitted: int = 0
    submission_ids: List[uuid.UUID] = Field(default_factory=list)
    duplicates_skipped: int = 0
    candidates_rejected: int = 0
    attempts: int = 0


class DailyGenerationStats(BaseModel):
    success: bool = True
    day: date
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str
    details: List[str] = Field(default_factory=list)
