"""
HTTP-level tests for the FastAPI application with an in-memory datastore.
"""

import uuid

from poor_jokes.models.dtos import SubmissionStatus


class TestJokesEndpoint:

    async def test_list_jokes_with_votes(self, client, datastore):
        joke = datastore.seed_joke("Why did the chicken cross the road?")
        await datastore.add_rating(joke.id, "user-1", 1)

        response = await client.get("/api/jokes")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["jokes"][0]["content"] == "Why did the chicken cross the road?"
        assert body["jokes"][0]["up_votes"] == 1
        assert body["jokes"][0]["rating_percentage"] == 100

    async def test_submit_joke_created(self, client, datastore, dispatcher, recorder):
        response = await client.post("/api/jokes", json={"content": "cat puns are purr-fect", "submitted_by": "Kim"})

        assert response.status_code == 201
        body = response.json()
        assert body["duplicate_detected"] is False
        submission_id = uuid.UUID(body["submission_id"])
        assert datastore.submissions[submission_id].submitted_by == "Kim"
        await dispatcher.drain()
        assert recorder.calls[0][0] == "submission_created"

    async def test_submit_duplicate_is_success_shaped(self, client, datastore):
        datastore.seed_joke("Cat puns are purr-fect.")

        response = await client.post("/api/jokes", json={"content": "cat puns are purr-fect."})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["duplicate_detected"] is True
        assert body["submission_id"] is None

    async def test_submit_validation_error(self, client):
        response = await client.post("/api/jokes", json={"content": "   "})
        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    async def test_malformed_body_is_400(self, client):
        response = await client.post("/api/jokes", json={"submitted_by": "Kim"})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["details"]

    async def test_deactivate_requires_admin(self, client, datastore, admin_headers):
        joke = datastore.seed_joke("Why did the chicken cross the road?")

        denied = await client.post("/api/jokes/deactivate", json={"joke_id": str(joke.id)})
        assert denied.status_code == 401

        response = await client.post("/api/jokes/deactivate", json={"joke_id": str(joke.id)}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["joke"]["is_active"] is False

        again = await client.post("/api/jokes/deactivate", json={"joke_id": str(joke.id)}, headers=admin_headers)
        assert again.status_code == 404


class TestSubmissionsEndpoint:

    async def test_list_requires_admin(self, client):
        response = await client.get("/api/submissions", headers={"x-admin-password": "wrong"})
        assert response.status_code == 401
        assert response.json()["error"] == "UNAUTHORIZED"

    async def test_list_pending_by_default(self, client, datastore, admin_headers):
        pending = datastore.seed_submission("a pending joke to review")
        datastore.seed_submission("an old rejected joke", status=SubmissionStatus.REJECTED)

        response = await client.get("/api/submissions", headers=admin_headers)
        assert [s["id"] for s in response.json()["submissions"]] == [str(pending.id)]

        everything = await client.get("/api/submissions", params={"status": "all"}, headers=admin_headers)
        assert len(everything.json()["submissions"]) == 2

    async def test_approve_then_review_again(self, client, datastore, admin_headers):
        submission = datastore.seed_submission("cat puns are purr-fect")
        payload = {"submission_id": str(submission.id), "action": "approve", "reviewed_by": "mod-kim"}

        first = await client.post("/api/submissions", json=payload, headers=admin_headers)
        second = await client.post("/api/submissions", json=payload, headers=admin_headers)

        assert first.status_code == 200
        assert first.json()["formatted_content"] == "Cat puns are purr-fect."
        assert first.json()["reviewed_by"] == "mod-kim"
        assert second.status_code == 409
        assert second.json()["error"] == "ALREADY_REVIEWED"
        assert len(datastore.jokes) == 1

    async def test_reject(self, client, datastore, admin_headers):
        submission = datastore.seed_submission("cat puns are purr-fect")

        response = await client.post(
            "/api/submissions",
            json={"submission_id": str(submission.id), "action": "reject", "rejection_reason": "Too cheesy"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "rejected"
        assert datastore.submissions[submission.id].rejection_reason == "Too cheesy"

    async def test_invalid_content(self, client, datastore, admin_headers):
        submission = datastore.seed_submission("asdf qwer zxcv")
        response = await client.post(
            "/api/submissions",
            json={"submission_id": str(submission.id), "action": "approve"},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_CONTENT"
        assert response.json()["details"]

    async def test_unknown_submission(self, client, admin_headers):
        response = await client.post(
            "/api/submissions",
            json={"submission_id": str(uuid.uuid4()), "action": "approve"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    async def test_unknown_action(self, client, datastore, admin_headers):
        submission = datastore.seed_submission("cat puns are purr-fect")
        response = await client.post(
            "/api/submissions",
            json={"submission_id": str(submission.id), "action": "maybe"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    async def test_datastore_outage_is_503(self, client, datastore, admin_headers):
        datastore.fail("get_submission")
        response = await client.post(
            "/api/submissions",
            json={"submission_id": str(uuid.uuid4()), "action": "approve"},
            headers=admin_headers,
        )
        assert response.status_code == 503
        assert response.json()["error"] == "DATASTORE_UNAVAILABLE"


class TestRateEndpoint:

    async def test_vote_cycle(self, client, datastore):
        joke = datastore.seed_joke("Why did the chicken cross the road?")
        payload = {"joke_id": str(joke.id), "user_id": "user-1", "rating": 1}

        added = await client.post("/api/rate", json=payload)
        removed = await client.post("/api/rate", json=payload)

        assert (added.status_code, added.json()["action"]) == (201, "added")
        assert (removed.status_code, removed.json()["action"]) == (200, "removed")

    async def test_invalid_rating_value(self, client, datastore):
        joke = datastore.seed_joke("Why did the chicken cross the road?")
        response = await client.post("/api/rate", json={"joke_id": str(joke.id), "user_id": "u", "rating": 5})
        assert response.status_code == 400

    async def test_unknown_joke(self, client):
        response = await client.post("/api/rate", json={"joke_id": str(uuid.uuid4()), "user_id": "u", "rating": 1})
        assert response.status_code == 404


class TestAdminEndpoints:

    async def test_deduplicate(self, client, datastore, admin_headers):
        datastore.seed_joke("Why did the chicken cross the road?")
        datastore.seed_joke("why did the chicken cross the road?")

        response = await client.post("/api/deduplicate", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["duplicates_removed"] == 1
        assert len(datastore.jokes) == 1

    async def test_deduplicate_requires_admin(self, client):
        response = await client.post("/api/deduplicate")
        assert response.status_code == 401


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
