"""
Models package for the poor_jokes service.

This package contains SQLAlchemy ORM models and Pydantic DTOs.
"""

# Ensure all ORM models are registered with the Base metadata when this package is imported.
from . import base
from . import joke_orm
from . import rating_orm
from . import submission_orm

# Import Base and ORM models for easy access
from .base import Base
from .joke_orm import JokeORM
from .rating_orm import JokeRatingORM
from .submission_orm import JokeSubmissionORM

# Import DTOs for easy access
from .dtos import (
    DailyGenerationReport,
    DailyGenerationStats,
    DeactivateJokeRequest,
    DeactivateJokeResponse,
    DeduplicationReport,
    DuplicateJokeDetail,
    ErrorResponse,
    FormatResult,
    JokeCandidate,
    JokeDTO,
    JokeListResponse,
    JokeRatingDTO,
    QualityReport,
    RateJokeRequest,
    RateJokeResponse,
    ReviewAction,
    ReviewResult,
    ReviewSubmissionRequest,
    SubmissionDTO,
    SubmissionListResponse,
    SubmissionStatus,
    SubmitJokeRequest,
    SubmitJokeResponse,
)

__all__ = [
    # Base
    "Base",
    # ORMs
    "JokeORM",
    "JokeRatingORM",
    "JokeSubmissionORM",
    # DTOs
    "DailyGenerationReport",
    "DailyGenerationStats",
    "DeactivateJokeRequest",
    "DeactivateJokeResponse",
    "DeduplicationReport",
    "DuplicateJokeDetail",
    "ErrorResponse",
    "FormatResult",
    "JokeCandidate",
    "JokeDTO",
    "JokeListResponse",
    "JokeRatingDTO",
    "QualityReport",
    "RateJokeRequest",
    "RateJokeResponse",
    "ReviewAction",
    "ReviewResult",
    "ReviewSubmissionRequest",
    "SubmissionDTO",
    "SubmissionListResponse",
    "SubmissionStatus",
    "SubmitJokeRequest",
    "SubmitJokeResponse",
]
