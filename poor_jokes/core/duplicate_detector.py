"""
Duplicate detection for joke submissions.

A candidate is a duplicate when its normalized text exactly matches an active joke or a
pending submission, or when its edit-distance similarity to one of them is strictly above
the configured threshold.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple

from poor_jokes.core.normalizer import normalize_content
from poor_jokes.core.similarity import MAX_COMPARABLE_LENGTH, similarity

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.90


@dataclass
class DuplicateCheckResult:
    """
    Outcome of a duplicate check.

    `check_failed` is set when the existing records could not be read and the detector
    fell open; `is_duplicate` is then always False.
    """
    is_duplicate: bool = False
    match_type: Optional[str] = None  # "exact" | "near"
    matching_jokes: List[Any] = field(default_factory=list)
    matching_submissions: List[Any] = field(default_factory=list)
    best_similarity: float = 0.0
    check_failed: bool = False


def _content_of(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return item.get("content") or ""
    return getattr(item, "content", "") or ""


class DuplicateDetector:
    """
    Decides whether a joke candidate duplicates something already live or awaiting review.
    """

    def __init__(self, threshold: float = DEFAULT_SIMILARITY_THRESHOLD):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("threshold must be within [0, 1]")
        self.threshold = threshold

    def is_duplicate(
        self,
        candidate_content: str,
        active_jokes: Iterable[Any],
        pending_submissions: Iterable[Any],
    ) -> bool:
        return self.find_duplicates(candidate_content, active_jokes, pending_submissions).is_duplicate

    def find_duplicates(
        self,
        candidate_content: str,
        active_jokes: Iterable[Any],
        pending_submissions: Iterable[Any],
    ) -> DuplicateCheckResult:
        """
        Evaluate the exact-match rule first over every existing entry, then the
        near-match rule.

        Args:
            candidate_content: Raw candidate text.
            active_jokes: Active jokes, as strings or objects exposing `content`.
            pending_submissions: Pending submissions, as strings or objects exposing `content`.

        Returns:
            DuplicateCheckResult describing the first rule that matched.
        """
        candidate = normalize_content(candidate_content)
        existing: List[Tuple[str, str, Any]] = [
            ("joke", normalize_content(_content_of(joke)), joke) for joke in active_jokes
        ] + [
            ("submission", normalize_content(_content_of(sub)), sub) for sub in pending_submissions
        ]

        result = DuplicateCheckResult()

        for kind, normalized, item in existing:
            if normalized == candidate:
                self._record(result, kind, item)
        if result.matching_jokes or result.matching_submissions:
            result.is_duplicate = True
            result.match_type = "exact"
            result.best_similarity = 1.0
            return result

        if len(candidate) > MAX_COMPARABLE_LENGTH:
            logger.debug("Candidate longer than comparable length; skipping near-match rule")
            return result

        for kind, normalized, item in existing:
            if len(normalized) > MAX_COMPARABLE_LENGTH:
                continue
            score = similarity(candidate, normalized)
            result.best_similarity = max(result.best_similarity, score)
            if score > self.threshold:
                self._record(result, kind, item)

        if result.matching_jokes or result.matching_submissions:
            result.is_duplicate = True
            result.match_type = "near"
        return result

    async def check(self, candidate_content: str, datastore) -> DuplicateCheckResult:
        """
        Read active jokes and pending submissions from the datastore and run the rules.

        A failed read fails open: the candidate is treated as unique and the failure is
        logged at WARNING level and flagged on the result.
        """
        try:
            active_jokes = await datastore.list_active_jokes()
            pending_submissions = await datastore.list_pending_submissions()
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                f"Duplicate check could not read existing jokes, allowing submission: {e}",
                exc_info=True,
            )
            return DuplicateCheckResult(check_failed=True)

        return self.find_duplicates(candidate_content, active_jokes, pending_submissions)

    @staticmethod
    def _record(result: DuplicateCheckResult, kind: str, item: Any) -> None:
        if kind == "joke":
            result.matching_jokes.append(item)
        else:
            result.matching_submissions.append(item)
