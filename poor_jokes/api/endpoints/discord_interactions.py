"""
Discord interactions endpoint: the PING handshake and Approve / Reject button presses.

Discord signs every request with the application's Ed25519 key and refuses to use an
endpoint that accepts unsigned ones, so the signature is checked before the body is read.
"""

import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Request
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from poor_jokes.api.dependencies import get_moderation_service
from poor_jokes.config.settings import settings
from poor_jokes.core.exceptions import JokeServiceError, UnauthorizedError, ValidationError
from poor_jokes.core.moderation_service import ModerationService
from poor_jokes.integrations.base import parse_review_button, review_refusal_text
from poor_jokes.models.dtos import ReviewAction, ReviewSubmissionRequest

router = APIRouter()
logger = logging.getLogger(__name__)

# Interaction and response types
PING = 1
MESSAGE_COMPONENT = 3
PONG = 1
CHANNEL_MESSAGE_WITH_SOURCE = 4
EPHEMERAL = 64

DISCORD_REVIEWER = "discord_bot"
DISCORD_REJECTION_REASON = "Rejected via Discord"


def verify_signature(public_key_hex: str, signature_hex: str, timestamp: str, body: bytes) -> bool:
    """Check Discord's `X-Signature-Ed25519` over timestamp + raw body."""
    try:
        VerifyKey(bytes.fromhex(public_key_hex)).verify(
            timestamp.encode("utf-8") + body, bytes.fromhex(signature_hex)
        )
    except (BadSignatureError, ValueError):
        return False
    return True


def _message(content: str, ephemeral: bool = False) -> Dict[str, Any]:
    return {
        "type": CHANNEL_MESSAGE_WITH_SOURCE,
        "data": {"content": content, "flags": EPHEMERAL if ephemeral else 0},
    }


def _clicked_by(interaction: Dict[str, Any]) -> Optional[str]:
    user = (interaction.get("member") or {}).get("user") or interaction.get("user") or {}
    return user.get("username")


async def handle_button(interaction: Dict[str, Any], service: ModerationService) -> Dict[str, Any]:
    parsed = parse_review_button((interaction.get("data") or {}).get("custom_id"))
    if parsed is None:
        return _message("❌ Invalid submission ID", ephemeral=True)
    action, submission_id = parsed

    try:
        result = await service.review(ReviewSubmissionRequest(
            submission_id=submission_id,
            action=action,
            reviewed_by=DISCORD_REVIEWER,
            rejection_reason=DISCORD_REJECTION_REASON if action == ReviewAction.REJECT else None,
        ))
    except JokeServiceError as e:
        logger.info(f"Discord review of {submission_id} refused: {e.code}")
        return _message(f"❌ {review_refusal_text(e)}", ephemeral=True)

    logger.info(f"Submission {submission_id} {result.status.value} via Discord (clicked by {_clicked_by(interaction)})")
    if action == ReviewAction.APPROVE:
        return _message(
            "✅ **Joke approved!**\n\n"
            f"**Joke ID:** {submission_id}\n"
            f"**Content:** {result.formatted_content}\n\n"
            "Joke has been added to the collection."
        )

    submission = await service.datastore.get_submission(submission_id)
    return _message(
        "❌ **Joke rejected.**\n\n"
        f"**Joke ID:** {submission_id}\n"
        f"**Content:** {submission.content}\n\n"
        f"Reason: {result.rejection_reason}"
    )


@router.post("/interactions", summary="Discord interactions endpoint")
async def discord_interactions(
    request: Request,
    x_signature_ed25519: Optional[str] = Header(None),
    x_signature_timestamp: Optional[str] = Header(None),
    service: ModerationService = Depends(get_moderation_service),
) -> Dict[str, Any]:
    public_key = settings.DISCORD_PUBLIC_KEY
    if not public_key:
        raise UnauthorizedError("Discord interactions are not configured")

    body = await request.body()
    if not (x_signature_ed25519 and x_signature_timestamp) or not verify_signature(
        public_key, x_signature_ed25519, x_signature_timestamp, body
    ):
        raise UnauthorizedError("Invalid request signature")

    try:
        interaction = json.loads(body)
    except ValueError as e:
        raise ValidationError("Invalid interaction payload") from e
    if not isinstance(interaction, dict):
        raise ValidationError("Invalid interaction payload")

    interaction_type = interaction.get("type")
    if interaction_type == PING:
        return {"type": PONG}
    if interaction_type == MESSAGE_COMPONENT:
        return await handle_button(interaction, service)
    raise ValidationError("Invalid interaction type", details=[f"type: {interaction_type}"])
