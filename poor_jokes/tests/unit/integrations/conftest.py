import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import Response

from poor_jokes.models.dtos import SubmissionDTO, SubmissionStatus


@pytest.fixture
def submission():
    return SubmissionDTO(
        id=uuid.UUID("11111111-2222-3333-4444-555555555555"),
        content="Why did the *chicken* cross the road?",
        submitted_by="  jane   doe ",
        status=SubmissionStatus.PENDING,
        created_at=datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def mock_http_client():
    """AsyncMock standing in for httpx.AsyncClient; post() returns a 200 Telegram-style body."""
    response = MagicMock(spec=Response)
    response.status_code = 200
    response.json.return_value = {"ok": True, "result": {"message_id": 42}}
    client = AsyncMock()
    client.post.return_value = response
    return client
