"""
Telegram Bot API client for moderator notifications.

New submissions are posted to the moderator chat with inline Approve / Reject buttons
whose callback data (`approve_<id>` / `reject_<id>`) is handled by the webhook endpoint.
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

from poor_jokes.core.formatter import format_submitter_name
from poor_jokes.core.lifecycle import DEFAULT_REJECTION_REASON
from poor_jokes.integrations.base import APPROVE_PREFIX, REJECT_PREFIX, Notifier
from poor_jokes.models.dtos import SubmissionDTO

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.telegram.org"

_MARKDOWN_SPECIAL_RE = re.compile(r"([_*`\[])")


def escape_markdown(text: str) -> str:
    """Escape characters that legacy Telegram Markdown would interpret."""
    return _MARKDOWN_SPECIAL_RE.sub(r"\\\1", text or "")


def _timestamp(value: Optional[datetime]) -> str:
    return (value or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")


def build_review_keyboard(submission_id: Any, admin_url: Optional[str] = None) -> Dict[str, Any]:
    rows = [[
        {"text": "✅ Approve", "callback_data": f"{APPROVE_PREFIX}{submission_id}"},
        {"text": "❌ Reject", "callback_data": f"{REJECT_PREFIX}{submission_id}"},
    ]]
    if admin_url:
        rows.append([{"text": "👀 View Admin Dashboard", "url": admin_url}])
    return {"inline_keyboard": rows}


def submission_created_text(submission: SubmissionDTO) -> str:
    return (
        "🎭 *New Joke Submission*\n\n"
        "📝 *Joke Content:*\n"
        f"\"{escape_markdown(submission.content)}\"\n\n"
        "📊 *Details:*\n"
        f"• ID: `{submission.id}`\n"
        f"• Submitted by: {escape_markdown(format_submitter_name(submission.submitted_by))}\n"
        f"• Submitted at: {_timestamp(submission.created_at)}\n"
        "• Status: ⏳ Pending Review"
    )


def approved_text(submission: SubmissionDTO) -> str:
    return (
        "✅ *Joke Approved*\n\n"
        "📝 *Approved Joke:*\n"
        f"\"{escape_markdown(submission.content)}\"\n\n"
        "📊 *Details:*\n"
        f"• ID: `{submission.id}`\n"
        f"• Originally submitted by: {escape_markdown(format_submitter_name(submission.submitted_by))}\n"
        f"• Approved by: {escape_markdown(submission.reviewed_by or 'admin')}\n"
        f"• Approved at: {_timestamp(submission.reviewed_at)}\n"
        "• Status: ✅ Approved"
    )


def rejected_text(submission: SubmissionDTO, reason: Optional[str] = None) -> str:
    return (
        "❌ *Joke Rejected*\n\n"
        "📝 *Rejected Joke:*\n"
        f"\"{escape_markdown(submission.content)}\"\n\n"
        "📊 *Details:*\n"
        f"• ID: `{submission.id}`\n"
        f"• Originally submitted by: {escape_markdown(format_submitter_name(submission.submitted_by))}\n"
        f"• Rejected at: {_timestamp(submission.reviewed_at)}\n"
        f"• Reason: {escape_markdown(reason or DEFAULT_REJECTION_REASON)}\n"
        "• Status: ❌ Rejected"
    )


class TelegramNotifier(Notifier):
    """
    Async Telegram Bot API client.

    Args:
        bot_token: Bot token from @BotFather. Without it the notifier is a no-op.
        chat_id: Moderator chat that receives notifications.
        admin_url: Admin dashboard URL, linked from new-submission messages.
        api_base: Bot API base URL.
        timeout: Request timeout in seconds.
        client: Optional pre-built httpx.AsyncClient.
    """

    name = "telegram"

    def __init__(
        self,
        bot_token: Optional[str],
        chat_id: Optional[str],
        admin_url: Optional[str] = None,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.admin_url = admin_url
        self.api_base = api_base.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    async def close(self) -> None:
        await self.client.aclose()

    async def _call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.bot_token:
            logger.debug(f"Telegram bot token not configured, skipping {method}")
            return {}

        response = await self.client.post(f"{self.api_base}/bot{self.bot_token}/{method}", json=payload)
        response.raise_for_status()
        data = response.json()
        if not data.get("ok", False):
            raise httpx.HTTPError(f"Telegram {method} failed: {data.get('description', 'unknown error')}")
        return data

    async def send_message(
        self,
        text: str,
        reply_markup: Optional[Dict[str, Any]] = None,
        chat_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "chat_id": chat_id or self.chat_id,
            "text": text,
            "parse_mode": "Markdown",
        }
        if reply_markup:
            payload["reply_markup"] = reply_markup
        return await self._call("sendMessage", payload)

    async def notify_submission_created(self, submission: SubmissionDTO) -> None:
        data = await self.send_message(
            submission_created_text(submission),
            reply_markup=build_review_keyboard(submission.id, self.admin_url),
        )
        message_id = data.get("result", {}).get("message_id")
        logger.info(f"Telegram notification sent for submission {submission.id} (message {message_id})")

    async def notify_approved(self, submission: SubmissionDTO) -> None:
        await self.send_message(approved_text(submission))

    async def notify_rejected(self, submission: SubmissionDTO, reason: Optional[str] = None) -> None:
        await self.send_message(rejected_text(submission, reason))

    async def answer_callback_query(self, callback_query_id: str, text: str, show_alert: bool = False) -> None:
        await self._call(
            "answerCallbackQuery",
            {"callback_query_id": callback_query_id, "text": text, "show_alert": show_alert},
        )

    async def edit_message_text(
        self,
        chat_id: Any,
        message_id: int,
        text: str,
        reply_markup: Optional[Dict[str, Any]] = None,
    ) -> None:
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "message_id": message_id,
            "text": text,
            "parse_mode": "Markdown",
        }
        if reply_markup:
            payload["reply_markup"] = reply_markup
        await self._call("editMessageText", payload)
