"""
Daily joke generator: asks an AI source for new puns, screens them, and feeds the
survivors into moderation as ordinary pending submissions.

    generate -> screen (model score, length, banned words, formatter, quality)
             -> ModerationService.submit (duplicate check, persist, notify)

Nothing is approved here; generated jokes wait for a moderator like any other submission.
"""

import logging
import re
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Sequence

from poor_jokes.core.exceptions import ValidationError
from poor_jokes.core.formatter import format_joke_content, validate_joke_quality
from poor_jokes.models.dtos import (
    DailyGenerationReport,
    DailyGenerationStats,
    JokeCandidate,
    SubmissionStatus,
    SubmitJokeRequest,
)

logger = logging.getLogger(__name__)

GENERATOR_NAME = "AI Daily Generator"
MIN_CANDIDATE_LENGTH = 10
MAX_CANDIDATE_LENGTH = 200
BANNED_WORDS = ("hate", "stupid", "dumb", "ugly", "fat")
# Extra candidates requested on retries to make up for duplicates.
RETRY_SURPLUS = 2

_BANNED_WORDS_RE = re.compile(r"\b(" + "|".join(BANNED_WORDS) + r")\b", re.IGNORECASE)


def _utc_day(value: datetime) -> date:
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(timezone.utc).date()


class JokeGenerator:
    """
    Args:
        source: Object with `async generate(count, temperature) -> List[JokeCandidate]`.
        service: ModerationService that receives the screened jokes.
        daily_count: Number of submissions to aim for per run.
        max_attempts: Extra generation rounds allowed when duplicates leave a shortfall.
        quality_threshold: Minimum model-reported quality score.
        fallback_jokes: Used when the source is not configured.
        clock: Zero-argument callable returning an aware datetime.
    """

    def __init__(
        self,
        source,
        service,
        daily_count: int = 5,
        max_attempts: int = 10,
        quality_threshold: float = 0.7,
        fallback_jokes: Sequence[str] = (),
        clock=None,
    ):
        self.source = source
        self.service = service
        self.daily_count = daily_count
        self.max_attempts = max_attempts
        self.quality_threshold = quality_threshold
        self.fallback_jokes = list(fallback_jokes)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def screen(self, candidate: JokeCandidate) -> Optional[str]:
        """Return why a candidate is unusable, or None if it may be submitted."""
        content = candidate.content.strip()
        if candidate.quality_score < self.quality_threshold:
            return f"model quality {candidate.quality_score} below {self.quality_threshold}"
        if not MIN_CANDIDATE_LENGTH <= len(content) <= MAX_CANDIDATE_LENGTH:
            return f"length {len(content)} outside {MIN_CANDIDATE_LENGTH}-{MAX_CANDIDATE_LENGTH}"
        if _BANNED_WORDS_RE.search(content):
            return "inappropriate wording"
        formatted = format_joke_content(content)
        if not formatted.is_valid:
            return "; ".join(formatted.errors)
        if not validate_joke_quality(formatted.formatted).is_high_quality:
            return "low quality score"
        return None

    def _fallback_candidates(self, count: int) -> List[JokeCandidate]:
        return [
            JokeCandidate(content=content, category="pun", quality_score=1.0)
            for content in self.fallback_jokes[:count]
        ]

    async def _candidates(self, count: int, attempt: int) -> List[JokeCandidate]:
        if not self.source.is_configured:
            return self._fallback_candidates(count) if attempt == 0 else []
        # Later rounds run hotter for more variety.
        return await self.source.generate(count, temperature=0.8 if attempt == 0 else 0.9)

    async def _submit_all(self, candidates: Iterable[JokeCandidate], report: DailyGenerationReport) -> None:
        for candidate in candidates:
            if report.submitted >= self.daily_count:
                return
            reason = self.screen(candidate)
            if reason:
                report.candidates_rejected += 1
                logger.info(f"Skipping generated joke ({reason}): {candidate.content[:50]!r}")
                continue
            try:
                response = await self.service.submit(
                    SubmitJokeRequest(content=candidate.content, submitted_by=GENERATOR_NAME)
                )
            except ValidationError as e:
                report.candidates_rejected += 1
                logger.info(f"Generated joke refused at submit: {e.message}")
                continue
            if response.duplicate_detected:
                report.duplicates_skipped += 1
                continue
            report.submitted += 1
            report.submission_ids.append(response.submission_id)

    async def run_daily(self) -> DailyGenerationReport:
        """
        Generate and submit up to `daily_count` new jokes.

        Datastore failures while submitting propagate; generation failures just leave
        the run short.
        """
        report = DailyGenerationReport()
        logger.info("Starting daily joke generation")

        await self._submit_all(await self._candidates(self.daily_count, 0), report)
        report.attempts = 1
        while report.submitted < self.daily_count and report.attempts <= self.max_attempts:
            needed = self.daily_count - report.submitted
            candidates = await self._candidates(needed + RETRY_SURPLUS, report.attempts)
            report.attempts += 1
            if not candidates:
                break
            logger.info(f"Attempt {report.attempts}: need {needed} more unique jokes")
            await self._submit_all(candidates, report)

        report.success = report.submitted > 0
        report.message = (
            f"Generated and submitted {report.submitted} jokes" if report.success else "No valid jokes generated"
        )
        logger.info(
            f"Daily generation finished: {report.submitted} submitted, {report.duplicates_skipped} duplicates, "
            f"{report.candidates_rejected} rejected over {report.attempts} attempts"
        )
        return report

    async def daily_stats(self, day: Optional[date] = None) -> DailyGenerationStats:
        """Counts of generator submissions created on `day` (UTC, default today) by status."""
        day = day or self._clock().date()
        submissions = [
            s for s in await self.service.list_submissions(None)
            if s.submitted_by == GENERATOR_NAME and _utc_day(s.created_at) == day
        ]
        by_status = {status: 0 for status in SubmissionStatus}
        for submission in submissions:
            by_status[SubmissionStatus(submission.status)] += 1
        return DailyGenerationStats(
            day=day,
            total=len(submissions),
            pending=by_status[SubmissionStatus.PENDING],
            approved=by_status[SubmissionStatus.APPROVED],
            rejected=by_status[SubmissionStatus.REJECTED],
        )
