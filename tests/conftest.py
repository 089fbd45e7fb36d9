"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - async_client: HTTPX client bound to the relay app
    - session: Signed-in session for a fixed test user
    - identity: In-process identity provider holding that session
    - store: Empty in-memory message store
    - fake_relay: Recording completion client with a canned reply
    - controller: ConversationController wired to the fakes above
    - relay_config: RelayConfig with a test API key
"""

from collections.abc import AsyncGenerator, Generator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.app import app
from src.auth.provider import IdentityProvider
from src.controller.conversation import ConversationController
from src.models.schemas import ChatMessage, Session, SessionUser
from src.relay.config import RelayConfig
from src.store.memory import InMemoryMessageStore


def completion_response(content: str) -> dict[str, Any]:
    """Build a minimal provider response carrying ``content``."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeRelay:
    """Completion client that records every call.

    Replies with ``reply`` unless ``error`` is set, in which case it raises.
    """

    def __init__(self, reply: str = "hello") -> None:
        self.reply = reply
        self.error: Exception | None = None
        self.calls: list[tuple[list[ChatMessage], str]] = []

    async def complete(self, messages: list[ChatMessage], access_token: str) -> dict[str, Any]:
        self.calls.append((list(messages), access_token))
        if self.error is not None:
            raise self.error
        return completion_response(self.reply)


@pytest.fixture
def session() -> Session:
    return Session(user=SessionUser(id="user-123"), access_token="token-abc")


@pytest.fixture
def identity(session: Session) -> IdentityProvider:
    return IdentityProvider(session)


@pytest.fixture
def store() -> InMemoryMessageStore:
    return InMemoryMessageStore()


@pytest.fixture
def fake_relay() -> FakeRelay:
    return FakeRelay()


@pytest.fixture
def controller(
    identity: IdentityProvider,
    store: InMemoryMessageStore,
    fake_relay: FakeRelay,
) -> Generator[ConversationController]:
    controller = ConversationController(identity=identity, store=store, relay=fake_relay)
    yield controller
    controller.close()


@pytest.fixture
def relay_config() -> RelayConfig:
    return RelayConfig(api_key="gsk-test-key")


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
