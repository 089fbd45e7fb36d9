"""Integration tests for the completion relay endpoint.

Exercises the real FastAPI app through httpx ASGITransport. The completion
provider is stubbed with httpx.MockTransport so no API key or network is needed.
"""

import json
from collections.abc import Callable, Iterator
from unittest.mock import patch

import httpx
import pytest
import pytest_check as check
from httpx import AsyncClient

import src.relay.completion as completion_module
from src.relay.completion import CompletionRelay
from src.relay.config import RelayConfig

RELAY_PATH = "/functions/v1/chat"
PROVIDER_REPLY = {"choices": [{"message": {"role": "assistant", "content": "hello"}}]}


@pytest.fixture
def upstream_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def stub_upstream(
    upstream_requests: list[httpx.Request],
) -> Iterator[Callable[[httpx.Response], None]]:
    """Route relay calls to a stubbed provider.

    Yields a setter for the canned provider response.
    """
    response = {"value": httpx.Response(200, json=PROVIDER_REPLY)}

    def handler(request: httpx.Request) -> httpx.Response:
        upstream_requests.append(request)
        return response["value"]

    relay = CompletionRelay(
        config=RelayConfig(api_key="gsk-test-key"),
        transport=httpx.MockTransport(handler),
    )

    def set_response(value: httpx.Response) -> None:
        response["value"] = value

    with patch("src.api.chat.get_completion_relay", return_value=relay):
        yield set_response


class TestRelayEndpoint:
    """Integration tests for /functions/v1/chat."""

    async def test_success_returns_provider_json(
        self,
        async_client: AsyncClient,
        stub_upstream: Callable[[httpx.Response], None],
        upstream_requests: list[httpx.Request],
    ) -> None:
        """Test that a valid request returns the provider JSON with CORS headers."""
        response = await async_client.post(
            RELAY_PATH,
            json={"messages": [{"role": "user", "content": "hi"}]},
            headers={"Authorization": "Bearer token-abc"},
        )

        check.equal(response.status_code, 200)
        check.equal(response.json(), PROVIDER_REPLY)
        check.equal(response.headers["access-control-allow-origin"], "*")
        sent = json.loads(upstream_requests[0].content)
        check.equal(sent["messages"][0]["role"], "system")
        check.equal(sent["messages"][1:], [{"role": "user", "content": "hi"}])
        check.equal(sent["model"], "llama-3.3-70b-versatile")

    async def test_options_returns_empty_200(self, async_client: AsyncClient) -> None:
        """Test that OPTIONS returns an empty 200."""
        response = await async_client.options(RELAY_PATH)

        check.equal(response.status_code, 200)
        check.equal(response.content, b"")
        check.equal(response.headers["access-control-allow-origin"], "*")
        check.is_in("authorization", response.headers["access-control-allow-headers"])

    async def test_browser_preflight_reaches_the_route(self, async_client: AsyncClient) -> None:
        """Test that a preflight with Origin gets the route's empty 200 and headers."""
        response = await async_client.options(
            RELAY_PATH,
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, content-type",
            },
        )

        check.equal(response.status_code, 200)
        check.equal(response.content, b"")
        check.equal(response.headers["access-control-allow-origin"], "*")
        check.equal(
            response.headers["access-control-allow-headers"],
            "authorization, x-client-info, apikey, content-type",
        )
        check.is_not_in("access-control-allow-credentials", response.headers)

    async def test_non_array_messages_returns_500(self, async_client: AsyncClient) -> None:
        """Test that a non-array messages field returns the error envelope."""
        response = await async_client.post(RELAY_PATH, json={"messages": "not-an-array"})

        assert response.status_code == 500
        assert "error" in response.json()

    @pytest.mark.parametrize(
        "body",
        [{}, {"messages": None}, {"messages": {"role": "user"}}, ["not", "an", "object"]],
    )
    async def test_missing_or_invalid_messages_returns_500(
        self, async_client: AsyncClient, body: object
    ) -> None:
        """Test that bodies without a messages array are rejected."""
        response = await async_client.post(RELAY_PATH, json=body)

        check.equal(response.status_code, 500)
        check.equal(response.json(), {"error": "Invalid messages format"})

    async def test_malformed_json_returns_500(self, async_client: AsyncClient) -> None:
        """Test that an unparseable body is rejected."""
        response = await async_client.post(
            RELAY_PATH,
            content="not valid json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Invalid messages format"}

    async def test_upstream_failure_returns_500(
        self,
        async_client: AsyncClient,
        stub_upstream: Callable[[httpx.Response], None],
    ) -> None:
        """Test that a provider failure returns the upstream error."""
        stub_upstream(httpx.Response(503, text="overloaded"))

        response = await async_client.post(RELAY_PATH, json={"messages": []})

        check.equal(response.status_code, 500)
        check.equal(response.json(), {"error": "Failed to get response from GROQ API"})
        check.equal(response.headers["access-control-allow-origin"], "*")

    async def test_other_methods_take_the_same_path(
        self,
        async_client: AsyncClient,
        stub_upstream: Callable[[httpx.Response], None],
    ) -> None:
        """Only OPTIONS is special; GET without a body is an invalid request."""
        get_response = await async_client.get(RELAY_PATH)
        put_response = await async_client.put(
            RELAY_PATH, json={"messages": [{"role": "user", "content": "hi"}]}
        )

        check.equal(get_response.status_code, 500)
        check.equal(put_response.status_code, 200)
        check.equal(put_response.json(), PROVIDER_REPLY)

    async def test_missing_api_key_returns_500(self, async_client: AsyncClient) -> None:
        """Test that a missing provider key returns a generic 500."""
        completion_module._completion_relay = None
        with patch.dict("os.environ", {"GROQ_API_KEY": ""}):
            response = await async_client.post(RELAY_PATH, json={"messages": []})
        completion_module._completion_relay = None

        assert response.status_code == 500
        assert "error" in response.json()


class TestHealth:
    async def test_health_check(self, async_client: AsyncClient) -> None:
        """Test the health endpoint."""
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "chat-relay"}
