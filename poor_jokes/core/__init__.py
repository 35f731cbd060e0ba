"""
Core components for the Poor Jokes service.
"""

from .normalizer import normalize_content
from .similarity import levenshtein_distance, similarity
from .duplicate_detector import DuplicateCheckResult, DuplicateDetector
from .formatter import format_joke_content, format_submitter_name, validate_joke_quality
from .lifecycle import SubmissionLifecycle
from .moderation_service import ModerationService
from .ratings import RatingService
from .deduplication import deduplicate_jokes
from .joke_generator import JokeGenerator

__all__ = [
    "normalize_content",
    "levenshtein_distance",
    "similarity",
    "DuplicateCheckResult",
    "DuplicateDetector",
    "format_joke_content",
    "format_submitter_name",
    "validate_joke_quality",
    "SubmissionLifecycle",
    "ModerationService",
    "RatingService",
    "deduplicate_jokes",
    "JokeGenerator",
]
