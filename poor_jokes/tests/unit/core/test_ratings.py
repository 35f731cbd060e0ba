import uuid

import pytest

from poor_jokes.core.exceptions import JokeNotFoundError
from poor_jokes.core.ratings import RatingService
from poor_jokes.models.dtos import RateJokeRequest


@pytest.fixture
def ratings(datastore):
    return RatingService(datastore)


@pytest.fixture
def joke(datastore):
    return datastore.seed_joke("Why did the chicken cross the road?")


async def test_first_vote_is_added(ratings, datastore, joke):
    response = await ratings.rate(RateJokeRequest(joke_id=joke.id, user_id="user-1", rating=1))

    assert response.action == "added"
    listed = (await datastore.list_active_jokes())[0]
    assert (listed.up_votes, listed.down_votes, listed.total_votes) == (1, 0, 1)
    assert listed.rating_percentage == 100


async def test_same_vote_twice_removes_it(ratings, datastore, joke):
    await ratings.rate(RateJokeRequest(joke_id=joke.id, user_id="user-1", rating=-1))
    response = await ratings.rate(RateJokeRequest(joke_id=joke.id, user_id="user-1", rating=-1))

    assert response.action == "removed"
    assert datastore.ratings == {}


async def test_opposite_vote_updates_it(ratings, datastore, joke):
    await ratings.rate(RateJokeRequest(joke_id=joke.id, user_id="user-1", rating=1))
    response = await ratings.rate(RateJokeRequest(joke_id=joke.id, user_id="user-1", rating=-1))

    assert response.action == "updated"
    assert [r.rating for r in datastore.ratings.values()] == [-1]


async def test_rating_percentage_rounds(ratings, datastore, joke):
    for user, vote in (("a", 1), ("b", 1), ("c", -1)):
        await ratings.rate(RateJokeRequest(joke_id=joke.id, user_id=user, rating=vote))
    listed = (await datastore.list_active_jokes())[0]
    assert listed.rating_percentage == 67


async def test_unknown_joke(ratings):
    with pytest.raises(JokeNotFoundError):
        await ratings.rate(RateJokeRequest(joke_id=uuid.uuid4(), user_id="user-1", rating=1))


async def test_inactive_joke_cannot_be_rated(ratings, datastore):
    hidden = datastore.seed_joke("A retired joke about owls.", is_active=False)
    with pytest.raises(JokeNotFoundError):
        await ratings.rate(RateJokeRequest(joke_id=hidden.id, user_id="user-1", rating=1))


def test_rating_must_be_plus_or_minus_one():
    from pydantic import ValidationError as PydanticValidationError
    with pytest.raises(PydanticValidationError):
        RateJokeRequest(joke_id=uuid.uuid4(), user_id="user-1", rating=0)
