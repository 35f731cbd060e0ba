"""
FastAPI application for the Poor Jokes service.

This module initializes and configures the FastAPI application that serves the joke,
submission, rating and moderation endpoints used by the browser extension and the admin
dashboard.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from poor_jokes.api.endpoints import admin, discord_interactions, generation, jokes, ratings, submissions, telegram_webhook
from poor_jokes.config.settings import settings
from poor_jokes.core.exceptions import JokeServiceError
from poor_jokes.integrations.discord import DiscordNotifier
from poor_jokes.integrations.dispatcher import NotificationDispatcher
from poor_jokes.integrations.email_notifier import EmailNotifier
from poor_jokes.integrations.openai_source import OpenAIJokeSource
from poor_jokes.integrations.telegram import TelegramNotifier
from poor_jokes.models.dtos import ErrorResponse
from poor_jokes.storage.datastore import SqlAlchemyJokeDatastore
from poor_jokes.utils.db_health import test_db_connection
from poor_jokes.utils.db_session import get_async_engine, get_async_session_factory
from poor_jokes.utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)


def build_dispatcher() -> NotificationDispatcher:
    """Build the notification fan-out from settings. Unconfigured channels stay silent."""
    timeout = settings.NOTIFICATION_TIMEOUT_SECONDS
    notifiers = [
        TelegramNotifier(
            bot_token=settings.TELEGRAM_BOT_TOKEN,
            chat_id=settings.TELEGRAM_CHAT_ID,
            admin_url=settings.ADMIN_URL,
            api_base=settings.TELEGRAM_API_BASE,
            timeout=timeout,
        ),
        DiscordNotifier(webhook_url=settings.DISCORD_WEBHOOK_URL, admin_url=settings.ADMIN_URL, timeout=timeout),
        EmailNotifier(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_USE_TLS,
            sender=settings.NOTIFY_EMAIL_FROM,
            recipient=settings.NOTIFY_EMAIL_TO,
            admin_url=settings.ADMIN_URL,
            timeout=timeout,
        ),
    ]
    return NotificationDispatcher(
        notifiers,
        timeout_seconds=timeout,
        queue_size=settings.NOTIFICATION_QUEUE_SIZE,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Startup configures logging, checks the database and starts the notification worker;
    shutdown delivers queued notifications and releases connections.
    """
    setup_logging(Path(settings.LOGGING_CONFIG_PATH))
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    engine = get_async_engine()
    if not await test_db_connection(engine):
        logger.warning("Database not reachable at startup; requests will fail until it is")

    dispatcher = build_dispatcher()
    app.state.datastore = SqlAlchemyJokeDatastore(get_async_session_factory())
    app.state.dispatcher = dispatcher
    app.state.telegram = next(
        (n for n in dispatcher.notifiers if isinstance(n, TelegramNotifier) and n.bot_token), None
    )
    app.state.joke_source = OpenAIJokeSource(
        api_key=settings.OPENAI_API_KEY,
        api_base=settings.OPENAI_API_BASE,
        model=settings.OPENAI_MODEL,
        min_quality=settings.GENERATOR_QUALITY_THRESHOLD,
        timeout=settings.GENERATOR_TIMEOUT_SECONDS,
    )
    dispatcher.start()

    yield

    logger.info("Shutting down application")
    await dispatcher.close()
    await app.state.joke_source.close()
    await engine.dispose()


async def joke_service_error_handler(request: Request, exc: JokeServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    body = ErrorResponse(error=exc.code, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    ]
    body = ErrorResponse(error="VALIDATION_ERROR", message="Invalid request", details=details)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""Joke service for the Poor Jokes new-tab extension.

        This API provides endpoints for:
        - Serving active jokes with vote statistics
        - Accepting joke submissions with duplicate detection
        - Moderator review (admin dashboard and Telegram bot)
        - Thumbs-up / thumbs-down ratings""",
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_tags=[
            {"name": "jokes", "description": "Joke listing and submission"},
            {"name": "submissions", "description": "Moderation of submitted jokes"},
            {"name": "ratings", "description": "Joke votes"},
            {"name": "admin", "description": "Maintenance operations"},
            {"name": "telegram", "description": "Telegram bot webhook"},
            {"name": "discord", "description": "Discord interactions (review buttons)"},
            {"name": "health", "description": "Health check and monitoring"},
        ],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS if not settings.DEBUG else ["*"],
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS if not settings.DEBUG else ["*"],
    )

    app.add_exception_handler(JokeServiceError, joke_service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    app.include_router(jokes.router, prefix="/api/jokes", tags=["jokes"])
    app.include_router(submissions.router, prefix="/api/submissions", tags=["submissions"])
    app.include_router(ratings.router, prefix="/api/rate", tags=["ratings"])
    app.include_router(admin.router, prefix="/api", tags=["admin"])
    app.include_router(generation.router, prefix="/api", tags=["admin"])
    app.include_router(telegram_webhook.router, prefix="/api/telegram", tags=["telegram"])
    app.include_router(discord_interactions.router, prefix="/api/discord", tags=["discord"])

    @app.get("/health", tags=["health"], summary="Health Check")
    async def health_check():
        """Report service status and which notification channels are configured."""
        dispatcher = getattr(app.state, "dispatcher", None)
        channels = [n.name for n in dispatcher.notifiers if n.is_configured] if dispatcher else []
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "notification_channels": channels,
            "debug_mode": settings.DEBUG,
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("poor_jokes.api.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
