"""
FastAPI dependencies.

Long-lived collaborators (datastore, dispatcher, Telegram client) are created in the
application lifespan and kept on `app.state`; tests override these functions instead.
"""

import secrets
from typing import Optional

from fastapi import Depends, Header, Request

from poor_jokes.config.settings import settings
from poor_jokes.core.duplicate_detector import DuplicateDetector
from poor_jokes.core.joke_generator import JokeGenerator
from poor_jokes.core.exceptions import UnauthorizedError
from poor_jokes.core.moderation_service import ModerationService
from poor_jokes.core.ratings import RatingService
from poor_jokes.integrations.dispatcher import NotificationDispatcher
from poor_jokes.integrations.openai_source import OpenAIJokeSource
from poor_jokes.integrations.telegram import TelegramNotifier


def get_datastore(request: Request):
    return request.app.state.datastore


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher


def get_telegram_notifier(request: Request) -> Optional[TelegramNotifier]:
    return getattr(request.app.state, "telegram", None)


def get_moderation_service(
    datastore=Depends(get_datastore),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> ModerationService:
    return ModerationService(
        datastore,
        dispatcher,
        detector=DuplicateDetector(threshold=settings.SIMILARITY_THRESHOLD),
        min_length=settings.MIN_JOKE_LENGTH,
        max_length=settings.MAX_JOKE_LENGTH,
        max_submission_length=settings.MAX_SUBMISSION_LENGTH,
    )


def get_rating_service(datastore=Depends(get_datastore)) -> RatingService:
    return RatingService(datastore)


async def require_admin(x_admin_password: Optional[str] = Header(None)) -> None:
    """Reject the request unless the x-admin-password header matches ADMIN_PASSWORD."""
    if not x_admin_password or not secrets.compare_digest(
        x_admin_password.encode("utf-8"), settings.ADMIN_PASSWORD.encode("utf-8")
    ):
        raise UnauthorizedError("Unauthorized")


def get_joke_source(request: Request) -> OpenAIJokeSource:
    return request.app.state.joke_source


def get_joke_generator(
    service: ModerationService = Depends(get_moderation_service),
    source: OpenAIJokeSource = Depends(get_joke_source),
) -> JokeGenerator:
    return JokeGenerator(
        source,
        service,
        daily_count=settings.GENERATOR_DAILY_COUNT,
        max_attempts=settings.GENERATOR_MAX_ATTEMPTS,
        quality_threshold=settings.GENERATOR_QUALITY_THRESHOLD,
    )


async def require_admin_or_cron(
    x_admin_password: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
) -> None:
    """Accept the admin password, or `Authorization: Bearer <CRON_SECRET>` from the scheduler."""
    cron_secret = settings.CRON_SECRET
    if cron_secret and authorization and secrets.compare_digest(
        authorization.encode("utf-8"), f"Bearer {cron_secret}".encode("utf-8")
    ):
        return
    await require_admin(x_admin_password)
