"""
Admin endpoints for listing and reviewing joke submissions.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from poor_jokes.api.dependencies import get_moderation_service, require_admin
from poor_jokes.core.moderation_service import ModerationService
from poor_jokes.models.dtos import (
    ReviewResult,
    ReviewSubmissionRequest,
    SubmissionListResponse,
    SubmissionStatus,
)

router = APIRouter(dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)

ALL_STATUSES = "all"


@router.get("", response_model=SubmissionListResponse, summary="List submissions (admin)")
async def list_submissions(
    status: str = Query(
        SubmissionStatus.PENDING.value,
        pattern="^(pending|approved|rejected|all)$",
        description="Filter by status, or 'all'.",
    ),
    service: ModerationService = Depends(get_moderation_service),
) -> SubmissionListResponse:
    status_filter: Optional[SubmissionStatus] = None if status == ALL_STATUSES else SubmissionStatus(status)
    submissions = await service.list_submissions(status_filter)
    return SubmissionListResponse(submissions=submissions)


@router.post("", response_model=ReviewResult, summary="Approve or reject a submission (admin)")
async def review_submission(
    request: ReviewSubmissionRequest,
    service: ModerationService = Depends(get_moderation_service),
) -> ReviewResult:
    return await service.review(request)
