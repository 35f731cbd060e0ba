"""
Unit tests for the SMTP email notifier.
"""

from unittest.mock import MagicMock, patch

import pytest

from poor_jokes.integrations.email_notifier import EmailNotifier


@pytest.fixture
def notifier():
    return EmailNotifier(
        host="smtp.example.com",
        port=587,
        username="bot@example.com",
        password="secret",
        sender="bot@example.com",
        recipient="mods@example.com",
        admin_url="https://jokes.example.com/admin",
    )


class TestEmailNotifier:

    def test_configuration(self):
        assert not EmailNotifier(host=None, recipient="mods@example.com").is_configured
        assert not EmailNotifier(host="smtp.example.com", sender="a@example.com").is_configured
        assert EmailNotifier(host="smtp.example.com", username="a@example.com", recipient="b@example.com").is_configured

    def test_build_message_has_text_and_html(self, notifier):
        message = notifier.build_message("Subject line", ["First <line>", "Second"])

        assert message["Subject"] == "Subject line"
        assert message["To"] == "mods@example.com"
        plain = message.get_body(preferencelist=("plain",)).get_content()
        html = message.get_body(preferencelist=("html",)).get_content()
        assert "First <line>" in plain
        assert "https://jokes.example.com/admin" in plain
        assert "First &lt;line&gt;" in html

    async def test_submission_created_sends_over_smtp(self, notifier, submission):
        with patch("poor_jokes.integrations.email_notifier.smtplib.SMTP") as mock_smtp:
            server = MagicMock()
            mock_smtp.return_value.__enter__.return_value = server

            await notifier.notify_submission_created(submission)

        mock_smtp.assert_called_once_with("smtp.example.com", 587, timeout=10.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("bot@example.com", "secret")
        sent = server.send_message.call_args[0][0]
        assert sent["Subject"] == f"🎭 New Joke Submission - {submission.id}"

    async def test_smtp_failure_is_raised(self, notifier, submission):
        with patch("poor_jokes.integrations.email_notifier.smtplib.SMTP", side_effect=OSError("refused")):
            with pytest.raises(OSError):
                await notifier.notify_rejected(submission, "Not funny")

    async def test_no_tls_or_login_without_credentials(self, mocker, submission):
        mock_smtp = mocker.patch("poor_jokes.integrations.email_notifier.smtplib.SMTP")
        server = mock_smtp.return_value.__enter__.return_value
        notifier = EmailNotifier(
            host="localhost", port=25, use_tls=False, sender="bot@example.com", recipient="mods@example.com"
        )

        await notifier.notify_approved(submission)

        server.starttls.assert_not_called()
        server.login.assert_not_called()
        assert server.send_message.call_args[0][0]["Subject"] == f"✅ Joke Approved - {submission.id}"
