"""
Maintenance routine that removes exact (normalized) duplicates already in the datastore.
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, List, Tuple

from poor_jokes.core.exceptions import DatastoreUnavailableError
from poor_jokes.core.normalizer import normalize_content
from poor_jokes.models.dtos import DeduplicationReport, DuplicateJokeDetail

logger = logging.getLogger(__name__)


def split_duplicates(records: List[Any]) -> Tuple[List[Any], List[Any]]:
    """
    Group records by normalized content and keep the oldest of each group.

    Returns:
        (kept, duplicates), both in oldest-first order.
    """
    groups: Dict[str, List[Any]] = OrderedDict()
    for record in sorted(records, key=lambda r: r.created_at):
        groups.setdefault(normalize_content(record.content), []).append(record)

    kept, duplicates = [], []
    for group in groups.values():
        kept.append(group[0])
        duplicates.extend(group[1:])
    return kept, duplicates


async def deduplicate_jokes(datastore) -> DeduplicationReport:
    """
    Hard-delete duplicate jokes, then duplicate submissions.

    Failures while reading or deleting jokes propagate. Failures in the submission pass
    are logged and reported via `submissions_checked=False`.
    """
    jokes = await datastore.list_all_jokes()
    kept, duplicates = split_duplicates(jokes)
    logger.info(f"Deduplication: {len(jokes)} jokes, {len(kept)} unique, {len(duplicates)} duplicates")

    report = DeduplicationReport(
        total_jokes=len(jokes),
        unique_jokes=len(kept),
        duplicate_details=[
            DuplicateJokeDetail(id=joke.id, content=joke.content, created_at=joke.created_at)
            for joke in duplicates
        ],
    )

    if duplicates:
        report.duplicates_removed = await datastore.delete_jokes([joke.id for joke in duplicates])
        logger.info(f"Removed {report.duplicates_removed} duplicate jokes")

    try:
        submissions = await datastore.list_all_submissions()
        _, duplicate_submissions = split_duplicates(submissions)
        if duplicate_submissions:
            report.duplicate_submissions_removed = await datastore.delete_submissions(
                [sub.id for sub in duplicate_submissions]
            )
            logger.info(f"Removed {report.duplicate_submissions_removed} duplicate submissions")
    except DatastoreUnavailableError as e:
        logger.warning(f"Could not deduplicate submissions: {e}")
        report.submissions_checked = False

    if report.duplicates_removed or report.duplicate_submissions_removed:
        report.message = "Database deduplication complete!"
    else:
        report.message = "No duplicates found! Database is clean."
    return report
