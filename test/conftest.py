import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# --- SETUP: la config se valida al importar la app ---
os.environ["AZURE_SERVICE_BUS_CONNECTION_STRING"] = (
    "Endpoint=sb://test.servicebus.windows.net/;"
    "SharedAccessKeyName=RootManageSharedAccessKey;SharedAccessKey=dGVzdA=="
)
os.environ["AZURE_SERVICE_BUS_QUEUE_NAME"] = "notifications-queue"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_ALG"] = "HS256"

from notification_api.api.deps import get_queue_sender
from notification_api.main import app
from notification_api.security.jwt_utils import create_token

TEST_SECRET = "test-secret"


class FakeQueue:
    """Sustituye a QueueSender: devuelve msg-1, msg-2, ... por envío."""

    def __init__(self):
        self.counter = 0
        self.send = AsyncMock(side_effect=self._send)

    async def _send(self, body, attributes):
        self.counter += 1
        return f"msg-{self.counter}"

    def status(self):
        return {"queue": "notifications-queue", "sent": self.send.await_count}


@pytest.fixture
def fake_queue() -> FakeQueue:
    return FakeQueue()


@pytest.fixture
def token() -> str:
    return create_token("user-1", TEST_SECRET, name="Test User", email="test@example.com")


@pytest.fixture
def queue_override(fake_queue):
    app.dependency_overrides[get_queue_sender] = lambda: fake_queue
    yield fake_queue
    app.dependency_overrides.pop(get_queue_sender, None)


@pytest_asyncio.fixture(scope="function")
async def client(queue_override) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def authenticated_client(client: AsyncClient, token: str) -> AsyncClient:
    client.headers["Authorization"] = f"Bearer {token}"
    return client


def notification_payload(**overrides) -> dict:
    payload = {
        "type": "SYSTEM_ALERT",
        "userId": "user-42",
        "title": "Maintenance",
        "body": "The service restarts at 02:00 UTC",
    }
    payload.update(overrides)
    return payload
