"""
Thumbs-up / thumbs-down voting on active jokes.
"""

import logging

from poor_jokes.core.exceptions import JokeNotFoundError, ValidationError
from poor_jokes.models.dtos import RateJokeRequest, RateJokeResponse

logger = logging.getLogger(__name__)

VALID_RATINGS = (1, -1)


class RatingService:
    """
    Records one vote per (joke, user). Voting the same way twice withdraws the vote;
    voting the other way replaces it.
    """

    def __init__(self, datastore):
        self.datastore = datastore

    async def rate(self, request: RateJokeRequest) -> RateJokeResponse:
        if request.rating not in VALID_RATINGS:
            raise ValidationError("Rating must be 1 (thumbs up) or -1 (thumbs down)")

        joke = await self.datastore.get_joke(request.joke_id)
        if joke is None or not joke.is_active:
            raise JokeNotFoundError(f"Joke {request.joke_id} not found")

        existing = await self.datastore.get_rating(request.joke_id, request.user_id)
        if existing is None:
            await self.datastore.add_rating(request.joke_id, request.user_id, request.rating)
            logger.info(f"Rating {request.rating:+d} added to joke {request.joke_id}")
            return RateJokeResponse(action="added", message="Rating added")

        if existing.rating == request.rating:
            await self.datastore.delete_rating(existing.id)
            logger.info(f"Rating removed from joke {request.joke_id}")
            return RateJokeResponse(action="removed", message="Rating removed")

        await self.datastore.update_rating(existing.id, request.rating)
        logger.info(f"Rating on joke {request.joke_id} changed to {request.rating:+d}")
        return RateJokeResponse(action="updated", message="Rating updated")
