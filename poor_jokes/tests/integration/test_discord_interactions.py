"""
Discord button presses arriving through the signed interactions endpoint.
"""

import json

import pytest
from nacl.encoding import HexEncoder
from nacl.signing import SigningKey

from poor_jokes.config.settings import settings
from poor_jokes.models.dtos import SubmissionStatus

TIMESTAMP = "1718000000"


@pytest.fixture
def signing_key(monkeypatch):
    key = SigningKey.generate()
    monkeypatch.setattr(settings, "DISCORD_PUBLIC_KEY", key.verify_key.encode(encoder=HexEncoder).decode())
    return key


@pytest.fixture
def post_interaction(client, signing_key):
    async def post(payload, key=None, timestamp=TIMESTAMP):
        body = json.dumps(payload).encode("utf-8")
        signature = (key or signing_key).sign(timestamp.encode("utf-8") + body).signature.hex()
        return await client.post(
            "/api/discord/interactions",
            content=body,
            headers={
                "Content-Type": "application/json",
                "X-Signature-Ed25519": signature,
                "X-Signature-Timestamp": timestamp,
            },
        )
    return post


def _button(custom_id):
    return {
        "type": 3,
        "data": {"custom_id": custom_id, "component_type": 2},
        "member": {"user": {"id": "42", "username": "mod-kim"}},
    }


async def test_ping_is_answered(post_interaction):
    response = await post_interaction({"type": 1})
    assert response.status_code == 200
    assert response.json() == {"type": 1}


async def test_approve_button(post_interaction, datastore):
    submission = datastore.seed_submission("cat puns are purr-fect")

    response = await post_interaction(_button(f"approve_{submission.id}"))

    assert response.status_code == 200
    body = response.json()
    assert body["type"] == 4
    assert "Joke approved!" in body["data"]["content"]
    assert "Cat puns are purr-fect." in body["data"]["content"]
    stored = datastore.submissions[submission.id]
    assert stored.status == SubmissionStatus.APPROVED
    assert stored.reviewed_by == "discord_bot"
    assert [j.content for j in datastore.jokes.values()] == ["Cat puns are purr-fect."]


async def test_reject_button(post_interaction, datastore):
    submission = datastore.seed_submission("cat puns are purr-fect")

    response = await post_interaction(_button(f"reject_{submission.id}"))

    stored = datastore.submissions[submission.id]
    assert stored.status == SubmissionStatus.REJECTED
    assert stored.rejection_reason == "Rejected via Discord"
    assert "Reason: Rejected via Discord" in response.json()["data"]["content"]
    assert datastore.jokes == {}


async def test_already_reviewed_is_ephemeral(post_interaction, datastore):
    submission = datastore.seed_submission("cat puns are purr-fect", status=SubmissionStatus.APPROVED)

    response = await post_interaction(_button(f"approve_{submission.id}"))

    assert response.status_code == 200
    assert response.json()["data"] == {"content": "❌ Submission already reviewed", "flags": 64}


async def test_malformed_custom_id(post_interaction):
    response = await post_interaction(_button("approve_not-a-uuid"))
    assert response.json()["data"]["content"] == "❌ Invalid submission ID"


async def test_bad_signature_is_rejected(post_interaction, datastore):
    submission = datastore.seed_submission("cat puns are purr-fect")

    response = await post_interaction(_button(f"approve_{submission.id}"), key=SigningKey.generate())

    assert response.status_code == 401
    assert response.json()["error"] == "UNAUTHORIZED"
    assert datastore.submissions[submission.id].status == SubmissionStatus.PENDING


async def test_missing_signature_headers(client, signing_key):
    response = await client.post("/api/discord/interactions", json={"type": 1})
    assert response.status_code == 401


async def test_unconfigured_public_key(client, monkeypatch):
    monkeypatch.setattr(settings, "DISCORD_PUBLIC_KEY", None)
    response = await client.post("/api/discord/interactions", json={"type": 1})
    assert response.status_code == 401


async def test_unknown_interaction_type(post_interaction):
    response = await post_interaction({"type": 2, "data": {"name": "joke"}})
    assert response.status_code == 400
