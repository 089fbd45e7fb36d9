"""HTTP client for the completion relay."""

import logging
from typing import Any

import httpx

from src.models.schemas import ChatMessage

logger = logging.getLogger(__name__)


class RelayClientError(Exception):
    """Raised when the relay call fails or returns an unusable reply."""

    pass


class RelayClient:
    """Posts conversation history to the relay with the user's bearer token.

    No timeout is applied: the call waits as long as the provider does.
    """

    def __init__(self, url: str, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._url = url
        self._transport = transport

    async def complete(self, messages: list[ChatMessage], access_token: str) -> dict[str, Any]:
        """Send the history and return the relay's JSON body.

        Raises:
            RelayClientError: On network failure, non-2xx status or a non-JSON body.
        """
        payload = {"messages": [m.model_dump() for m in messages]}
        async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
            try:
                response = await client.post(
                    self._url,
                    json=payload,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise RelayClientError(f"HTTP {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise RelayClientError(f"Connection failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise RelayClientError("Relay returned invalid JSON") from e


def extract_reply(data: dict[str, Any]) -> str:
    """Pull the first choice's text out of a provider response.

    Raises:
        RelayClientError: If the response has no usable first choice.
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise RelayClientError(f"Unexpected completion response: {data!r}") from e
    if not isinstance(content, str):
        raise RelayClientError(f"Unexpected completion content: {content!r}")
    return content
