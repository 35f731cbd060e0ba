"""
Discord webhook notifier.

Posts one embed per moderation event; colours follow the event (yellow for a new
submission, green for approval, red for rejection).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from poor_jokes.core.formatter import format_submitter_name
from poor_jokes.core.lifecycle import DEFAULT_REJECTION_REASON
from poor_jokes.integrations.base import APPROVE_PREFIX, REJECT_PREFIX, Notifier
from poor_jokes.models.dtos import SubmissionDTO

logger = logging.getLogger(__name__)

COLOR_PENDING = 0xFFC107
COLOR_APPROVED = 0x00FF00
COLOR_REJECTED = 0xFF0000

BOT_USERNAME = "Joke Moderator"
FOOTER_TEXT = "Poor Jokes Chrome Extension"

# Discord component types and button styles
ACTION_ROW = 1
BUTTON = 2
STYLE_SUCCESS, STYLE_DANGER, STYLE_LINK = 3, 4, 5


def _display_time(value: Optional[datetime]) -> str:
    return (value or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M:%S")


def build_embed(
    title: str,
    submission: SubmissionDTO,
    color: int,
    fields: List[Dict[str, Any]],
) -> Dict[str, Any]:
    return {
        "title": title,
        "description": f"**Joke ID:** {submission.id}\n**Content:** {submission.content}",
        "color": color,
        "fields": fields,
        "footer": {"text": FOOTER_TEXT},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def build_review_components(submission_id: Any, admin_url: Optional[str] = None) -> List[Dict[str, Any]]:
    """Approve / Reject buttons handled by the Discord interactions endpoint."""
    buttons = [
        {"type": BUTTON, "style": STYLE_SUCCESS, "label": "✅ Approve", "custom_id": f"{APPROVE_PREFIX}{submission_id}"},
        {"type": BUTTON, "style": STYLE_DANGER, "label": "❌ Reject", "custom_id": f"{REJECT_PREFIX}{submission_id}"},
    ]
    if admin_url:
        buttons.append({"type": BUTTON, "style": STYLE_LINK, "label": "👀 View Admin", "url": admin_url})
    return [{"type": ACTION_ROW, "components": buttons}]


class DiscordNotifier(Notifier):
    """Sends moderation events to a Discord channel webhook."""

    name = "discord"

    def __init__(
        self,
        webhook_url: Optional[str],
        admin_url: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.webhook_url = webhook_url
        self.admin_url = admin_url
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def is_configured(self) -> bool:
        return bool(self.webhook_url)

    async def close(self) -> None:
        await self.client.aclose()

    async def _post(self, embed: Dict[str, Any], components: Optional[List[Dict[str, Any]]] = None) -> None:
        payload: Dict[str, Any] = {"username": BOT_USERNAME, "embeds": [embed]}
        if components:
            payload["components"] = components
        response = await self.client.post(self.webhook_url, json=payload)
        response.raise_for_status()

    async def notify_submission_created(self, submission: SubmissionDTO) -> None:
        embed = build_embed(
            "🎭 New Joke Submission",
            submission,
            COLOR_PENDING,
            [
                {"name": "📅 Submitted", "value": _display_time(submission.created_at), "inline": True},
                {"name": "👤 Submitted By", "value": format_submitter_name(submission.submitted_by), "inline": True},
                {"name": "📊 Status", "value": "⏳ Pending Review", "inline": True},
            ],
        )
        await self._post(embed, build_review_components(submission.id, self.admin_url))
        logger.info(f"Discord notification sent for submission {submission.id}")

    async def notify_approved(self, submission: SubmissionDTO) -> None:
        embed = build_embed(
            "✅ Joke Approved",
            submission,
            COLOR_APPROVED,
            [
                {"name": "📅 Approved", "value": _display_time(submission.reviewed_at), "inline": True},
                {"name": "👤 Reviewed By", "value": submission.reviewed_by or "admin", "inline": True},
            ],
        )
        await self._post(embed)

    async def notify_rejected(self, submission: SubmissionDTO, reason: Optional[str] = None) -> None:
        embed = build_embed(
            "❌ Joke Rejected",
            submission,
            COLOR_REJECTED,
            [
                {"name": "📅 Rejected", "value": _display_time(submission.reviewed_at), "inline": True},
                {"name": "👤 Reviewed By", "value": submission.reviewed_by or "admin", "inline": True},
                {"name": "📝 Reason", "value": reason or DEFAULT_REJECTION_REASON, "inline": False},
            ],
        )
        await self._post(embed)
