"""
Joke rating endpoint.
"""

from fastapi import APIRouter, Depends, Response, status

from poor_jokes.api.dependencies import get_rating_service
from poor_jokes.core.ratings import RatingService
from poor_jokes.models.dtos import RateJokeRequest, RateJokeResponse

router = APIRouter()


@router.post("", response_model=RateJokeResponse, summary="Rate a joke up or down")
async def rate_joke(
    request: RateJokeRequest,
    response: Response,
    service: RatingService = Depends(get_rating_service),
) -> RateJokeResponse:
    result = await service.rate(request)
    if result.action == "added":
        response.status_code = status.HTTP_201_CREATED
    return result
