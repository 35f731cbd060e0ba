"""
SMTP email notifier for the moderator mailbox.

smtplib is blocking, so each send runs in a worker thread via asyncio.to_thread.
"""

import asyncio
import html
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from poor_jokes.core.formatter import format_submitter_name
from poor_jokes.core.lifecycle import DEFAULT_REJECTION_REASON
from poor_jokes.integrations.base import Notifier
from poor_jokes.models.dtos import SubmissionDTO

logger = logging.getLogger(__name__)


class EmailNotifier(Notifier):
    """Sends a plain-text + HTML email per moderation event."""

    name = "email"

    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        sender: Optional[str] = None,
        recipient: Optional[str] = None,
        admin_url: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender or username
        self.recipient = recipient
        self.admin_url = admin_url
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.sender and self.recipient)

    def build_message(self, subject: str, lines: list) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.sender
        message["To"] = self.recipient

        text_lines = list(lines)
        if self.admin_url:
            text_lines.append(f"Admin dashboard: {self.admin_url}")
        message.set_content("\n".join(text_lines))

        html_body = "".join(f"<p>{html.escape(line)}</p>" for line in text_lines)
        message.add_alternative(f"<html><body>{html_body}</body></html>", subtype="html")
        return message

    def _send_blocking(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(message)

    async def send(self, message: EmailMessage) -> None:
        await asyncio.to_thread(self._send_blocking, message)
        logger.info(f"Email sent to {self.recipient}: {message['Subject']}")

    async def notify_submission_created(self, submission: SubmissionDTO) -> None:
        await self.send(self.build_message(
            f"🎭 New Joke Submission - {submission.id}",
            [
                "A new joke is waiting for review.",
                f"Content: \"{submission.content}\"",
                f"Submitted by: {format_submitter_name(submission.submitted_by)}",
                f"Submission ID: {submission.id}",
            ],
        ))

    async def notify_approved(self, submission: SubmissionDTO) -> None:
        await self.send(self.build_message(
            f"✅ Joke Approved - {submission.id}",
            [
                "A joke submission was approved.",
                f"Content: \"{submission.content}\"",
                f"Reviewed by: {submission.reviewed_by or 'admin'}",
            ],
        ))

    async def notify_rejected(self, submission: SubmissionDTO, reason: Optional[str] = None) -> None:
        await self.send(self.build_message(
            f"❌ Joke Rejected - {submission.id}",
            [
                "A joke submission was rejected.",
                f"Content: \"{submission.content}\"",
                f"Reviewed by: {submission.reviewed_by or 'admin'}",
                f"Reason: {reason or DEFAULT_REJECTION_REASON}",
            ],
        ))
