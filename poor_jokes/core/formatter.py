"""
Joke content formatting and validation.

Formatting is applied when a submission is approved and promoted to a joke, not at
submission time, so the submitter's raw text is kept until a moderator has seen it.
"""

import re
from typing import Any

from poor_jokes.models.dtos import FormatResult, QualityReport

DEFAULT_MIN_LENGTH = 10
DEFAULT_MAX_LENGTH = 500
MIN_WORD_COUNT = 3
MAX_SUBMITTER_NAME_LENGTH = 50

EMPTY_CONTENT = "Content must be a non-empty string"
INVALID_PATTERN = "Content appears to be invalid or nonsensical"
GIBBERISH = "Content appears to be gibberish or nonsensical"
TOO_FEW_WORDS = f"Content must contain at least {MIN_WORD_COUNT} words"

COMMON_WORDS = frozenset({
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "is", "are", "was", "were", "be", "been", "have", "has", "had", "do", "does", "did",
    "will", "would", "could", "should", "may", "might", "can", "must", "shall",
})

_WHITESPACE_RE = re.compile(r"\s+")
_REPEATED_MARKS_RE = re.compile(r"[!?]{2,}")
_ELLIPSIS_RE = re.compile(r"\.{3,}")
_SENTENCE_END_RE = re.compile(r"[.!?]$")

# Checked against the formatted text without its closing punctuation.
_INVALID_PATTERNS = (
    re.compile(r"^[^a-zA-Z0-9]*$"),          # only special characters
    re.compile(r"^(.)\1{10,}$", re.IGNORECASE),  # one character repeated
    re.compile(r"^[a-z\s]*$"),               # all lowercase
    re.compile(r"^[A-Z\s]*$"),               # all uppercase (shouting)
    re.compile(r"^\d+$"),                    # only digits
    re.compile(r"^[^\w\s]*$"),               # no alphanumeric characters
)

_GIBBERISH_PATTERNS = (
    re.compile(r"^[a-z]{1,3}\s[a-z]{1,3}$"),
    re.compile(r"^[a-z]{2,}\s[a-z]{2,}\s[a-z]{2,}$"),
)

_COMMON_WORDS_RE = re.compile(r"\b(" + "|".join(sorted(COMMON_WORDS)) + r")\b", re.IGNORECASE)
_CHARACTER_RUN_RE = re.compile(r"(.)\1{3,}")


def format_joke_content(
    content: Any,
    min_length: int = DEFAULT_MIN_LENGTH,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> FormatResult:
    """
    Clean up raw joke text and validate it for promotion into the joke collection.

    Args:
        content: Raw submission text.
        min_length: Minimum formatted length, inclusive.
        max_length: Maximum formatted length, inclusive.

    Returns:
        FormatResult with the transformed text and every accumulated rule violation.
    """
    if not isinstance(content, str) or not content.strip():
        return FormatResult(
            formatted="",
            is_valid=False,
            errors=[EMPTY_CONTENT],
            original_length=len(content) if isinstance(content, str) else 0,
        )

    errors = []

    formatted = _WHITESPACE_RE.sub(" ", content.strip())
    formatted = _REPEATED_MARKS_RE.sub(lambda match: match.group(0)[0], formatted)
    formatted = _ELLIPSIS_RE.sub("...", formatted)
    formatted = formatted[0].upper() + formatted[1:]
    if not _SENTENCE_END_RE.search(formatted):
        formatted += "."

    if len(formatted) > max_length:
        errors.append(f"Content is too long (max {max_length} characters)")
    if len(formatted) < min_length:
        errors.append(f"Content is too short (min {min_length} characters)")

    body = formatted.rstrip(".!?")
    if any(pattern.search(body) for pattern in _INVALID_PATTERNS):
        errors.append(INVALID_PATTERN)

    lowered = body.lower()
    if any(pattern.search(lowered) for pattern in _GIBBERISH_PATTERNS):
        if not any(word in COMMON_WORDS for word in lowered.split()):
            errors.append(GIBBERISH)

    word_count = len(formatted.split())
    if word_count < MIN_WORD_COUNT:
        errors.append(TOO_FEW_WORDS)

    return FormatResult(
        formatted=formatted,
        is_valid=not errors,
        errors=errors,
        original_length=len(content),
        formatted_length=len(formatted),
        word_count=word_count,
    )


def format_submitter_name(submitted_by: Any) -> str:
    """Display form of a submitter name: title-cased, at most 50 characters, 'Anonymous' if blank."""
    if not isinstance(submitted_by, str):
        return "Anonymous"

    formatted = _WHITESPACE_RE.sub(" ", submitted_by.strip())
    formatted = " ".join(word[:1].upper() + word[1:].lower() for word in formatted.split(" ") if word)
    if len(formatted) > MAX_SUBMITTER_NAME_LENGTH:
        formatted = formatted[:MAX_SUBMITTER_NAME_LENGTH].strip()
    return formatted or "Anonymous"


def validate_joke_quality(content: str) -> QualityReport:
    checks = {
        "has_question": "?" in content,
        "has_punctuation": bool(re.search(r"[.!?]", content)),
        "has_common_words": bool(_COMMON_WORDS_RE.search(content)),
        "reasonable_length": 20 <= len(content) <= 400,
        "has_variety": len(set(content.lower())) > 10,
        "not_repetitive": not _CHARACTER_RUN_RE.search(content),
    }
    score = sum(1 for passed in checks.values() if passed)
    max_score = len(checks)
    return QualityReport(
        **checks,
        score=score,
        max_score=max_score,
        percentage=round(score / max_score * 100),
        is_high_quality=score >= 4,
    )
