"""
Unit tests for the Discord webhook notifier.
"""

import httpx
import pytest

from poor_jokes.integrations.discord import (
    COLOR_APPROVED,
    COLOR_PENDING,
    COLOR_REJECTED,
    DiscordNotifier,
)

WEBHOOK = "https://discord.com/api/webhooks/1/token"


@pytest.fixture
def notifier(mock_http_client):
    return DiscordNotifier(WEBHOOK, client=mock_http_client)


class TestDiscordNotifier:

    def test_configuration(self, mock_http_client):
        assert DiscordNotifier(WEBHOOK, client=mock_http_client).is_configured
        assert not DiscordNotifier(None, client=mock_http_client).is_configured

    async def test_submission_created_embed(self, notifier, mock_http_client, submission):
        await notifier.notify_submission_created(submission)

        url = mock_http_client.post.call_args[0][0]
        payload = mock_http_client.post.call_args[1]["json"]
        embed = payload["embeds"][0]
        assert url == WEBHOOK
        assert payload["username"] == "Joke Moderator"
        assert embed["color"] == COLOR_PENDING
        assert str(submission.id) in embed["description"]
        assert {"name": "👤 Submitted By", "value": "Jane Doe", "inline": True} in embed["fields"]

    async def test_event_colours(self, notifier, mock_http_client, submission):
        await notifier.notify_approved(submission)
        await notifier.notify_rejected(submission, "Not funny")

        approved, rejected = (call[1]["json"]["embeds"][0] for call in mock_http_client.post.call_args_list)
        assert approved["color"] == COLOR_APPROVED
        assert rejected["color"] == COLOR_REJECTED
        assert rejected["fields"][-1]["value"] == "Not funny"

    async def test_http_error_is_raised(self, notifier, mock_http_client, submission):
        mock_http_client.post.side_effect = httpx.ConnectError("unreachable")
        with pytest.raises(httpx.ConnectError):
            await notifier.notify_approved(submission)

    async def test_submission_created_has_review_buttons(self, mock_http_client, submission):
        notifier = DiscordNotifier(WEBHOOK, admin_url="https://jokes.example.com/admin", client=mock_http_client)

        await notifier.notify_submission_created(submission)

        row = mock_http_client.post.call_args[1]["json"]["components"][0]
        assert [b.get("custom_id") for b in row["components"]] == [
            f"approve_{submission.id}",
            f"reject_{submission.id}",
            None,
        ]
        assert row["components"][2]["url"] == "https://jokes.example.com/admin"

    async def test_review_events_have_no_buttons(self, notifier, mock_http_client, submission):
        await notifier.notify_approved(submission)
        assert "components" not in mock_http_client.post.call_args[1]["json"]
