"""
Public joke endpoints used by the extension, plus admin deactivation.
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from poor_jokes.api.dependencies import get_moderation_service, require_admin
from poor_jokes.core.moderation_service import ModerationService
from poor_jokes.models.dtos import (
    DeactivateJokeRequest,
    DeactivateJokeResponse,
    JokeListResponse,
    SubmitJokeRequest,
    SubmitJokeResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=JokeListResponse, summary="List active jokes with vote statistics")
async def list_jokes(service: ModerationService = Depends(get_moderation_service)) -> JokeListResponse:
    jokes = await service.list_jokes()
    return JokeListResponse(jokes=jokes)


@router.post(
    "",
    response_model=SubmitJokeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a joke for review",
)
async def submit_joke(
    request: SubmitJokeRequest,
    response: Response,
    service: ModerationService = Depends(get_moderation_service),
) -> SubmitJokeResponse:
    """
    Accept a joke submission.

    Returns 201 with the new submission id, or 200 with `duplicate_detected: true` when
    the joke already exists; duplicates are not stored.
    """
    result = await service.submit(request)
    if result.duplicate_detected:
        response.status_code = status.HTTP_200_OK
    return result


@router.post(
    "/deactivate",
    response_model=DeactivateJokeResponse,
    dependencies=[Depends(require_admin)],
    summary="Deactivate a joke (admin)",
)
async def deactivate_joke(
    request: DeactivateJokeRequest,
    service: ModerationService = Depends(get_moderation_service),
) -> DeactivateJokeResponse:
    joke = await service.deactivate_joke(request.joke_id)
    return DeactivateJokeResponse(message="Joke deactivated successfully", joke=joke)
