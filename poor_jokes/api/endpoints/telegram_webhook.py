"""
Telegram webhook: turns Approve / Reject button presses into reviews.

Telegram retries deliveries that do not get a 2xx, so every update is acknowledged with
`{"ok": true}` once it has been handled, including when the review itself was refused.
"""

import logging
import secrets
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Body, Depends, Header

from poor_jokes.api.dependencies import get_moderation_service, get_telegram_notifier
from poor_jokes.config.settings import settings
from poor_jokes.core.exceptions import JokeServiceError, UnauthorizedError
from poor_jokes.core.moderation_service import ModerationService
from poor_jokes.integrations.base import parse_review_button, review_refusal_text
from poor_jokes.integrations.telegram import (
    TelegramNotifier,
    approved_text,
    rejected_text,
)
from poor_jokes.models.dtos import ReviewAction, ReviewSubmissionRequest

router = APIRouter()
logger = logging.getLogger(__name__)

TELEGRAM_REVIEWER = "telegram_bot"
TELEGRAM_REJECTION_REASON = "Rejected via Telegram"


async def _telegram_call(description: str, call) -> None:
    try:
        await call
    except httpx.HTTPError as e:
        logger.warning(f"Telegram {description} failed: {e}")


async def handle_callback_query(
    callback_query: Dict[str, Any],
    service: ModerationService,
    telegram: TelegramNotifier,
) -> None:
    callback_id = callback_query.get("id")
    message = callback_query.get("message") or {}
    chat_id = (message.get("chat") or {}).get("id")
    message_id = message.get("message_id")

    if settings.TELEGRAM_CHAT_ID and str(chat_id) != str(settings.TELEGRAM_CHAT_ID):
        logger.warning(f"Ignoring Telegram callback from unexpected chat {chat_id}")
        await _telegram_call("answerCallbackQuery", telegram.answer_callback_query(callback_id, "Not authorized", True))
        return

    parsed = parse_review_button(callback_query.get("data"))
    if parsed is None:
        await _telegram_call(
            "answerCallbackQuery", telegram.answer_callback_query(callback_id, "Invalid submission ID", True)
        )
        return
    action, submission_id = parsed

    try:
        await service.review(ReviewSubmissionRequest(
            submission_id=submission_id,
            action=action,
            reviewed_by=TELEGRAM_REVIEWER,
            rejection_reason=TELEGRAM_REJECTION_REASON if action == ReviewAction.REJECT else None,
        ))
    except JokeServiceError as e:
        logger.info(f"Telegram review of {submission_id} refused: {e.code}")
        await _telegram_call(
            "answerCallbackQuery", telegram.answer_callback_query(callback_id, review_refusal_text(e), True)
        )
        return

    submission = await service.datastore.get_submission(submission_id)
    if action == ReviewAction.APPROVE:
        text, answer, outcome = approved_text(submission), "Joke approved successfully!", "approved"
    else:
        text, answer, outcome = rejected_text(submission, submission.rejection_reason), "Joke rejected", "rejected"

    if chat_id is not None and message_id is not None:
        await _telegram_call("editMessageText", telegram.edit_message_text(chat_id, message_id, text))
    await _telegram_call("answerCallbackQuery", telegram.answer_callback_query(callback_id, answer))
    logger.info(f"Submission {submission_id} {outcome} via Telegram")


@router.post("/webhook", summary="Telegram bot webhook")
async def telegram_webhook(
    update: Dict[str, Any] = Body(...),
    x_telegram_bot_api_secret_token: Optional[str] = Header(None),
    service: ModerationService = Depends(get_moderation_service),
    telegram: Optional[TelegramNotifier] = Depends(get_telegram_notifier),
) -> Dict[str, bool]:
    secret = settings.TELEGRAM_WEBHOOK_SECRET
    if secret and not secrets.compare_digest(
        (x_telegram_bot_api_secret_token or "").encode("utf-8"), secret.encode("utf-8")
    ):
        raise UnauthorizedError("Invalid Telegram webhook secret")

    if telegram is None:
        logger.debug("Telegram update received but no Telegram client is configured")
        return {"ok": True}

    if update.get("callback_query"):
        await handle_callback_query(update["callback_query"], service, telegram)
    elif update.get("message"):
        text = (update["message"].get("text") or "").strip()
        chat_id = (update["message"].get("chat") or {}).get("id")
        if text in ("/start", "/help"):
            logger.info(f"Telegram command {text} from chat {chat_id}")

    return {"ok": True}
