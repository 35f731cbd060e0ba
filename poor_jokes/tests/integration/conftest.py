from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient, Response

from poor_jokes.api.dependencies import get_datastore, get_dispatcher, get_telegram_notifier
from poor_jokes.api.main import create_app
from poor_jokes.config.settings import settings
from poor_jokes.integrations.telegram import TelegramNotifier

ADMIN_PASSWORD = "test-admin-password"
MODERATOR_CHAT_ID = "-1001"


@pytest.fixture
def admin_headers():
    return {"x-admin-password": ADMIN_PASSWORD}


@pytest.fixture
def telegram_http():
    response = MagicMock(spec=Response)
    response.status_code = 200
    response.json.return_value = {"ok": True, "result": True}
    client = AsyncMock()
    client.post.return_value = response
    return client


@pytest.fixture
def telegram(telegram_http):
    return TelegramNotifier(bot_token="123:abc", chat_id=MODERATOR_CHAT_ID, client=telegram_http)


@pytest.fixture
def app(monkeypatch, datastore, dispatcher, telegram):
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setattr(settings, "TELEGRAM_CHAT_ID", MODERATOR_CHAT_ID)
    monkeypatch.setattr(settings, "TELEGRAM_WEBHOOK_SECRET", None)

    application = create_app()
    application.dependency_overrides[get_datastore] = lambda: datastore
    application.dependency_overrides[get_dispatcher] = lambda: dispatcher
    application.dependency_overrides[get_telegram_notifier] = lambda: telegram
    return application


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as http_client:
        yield http_client
