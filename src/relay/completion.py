"""Upstream completion call made by the relay.

Prepends the fixed system prompt to the caller's conversation, POSTs it to
the provider with the configured sampling parameters and hands back the
provider JSON untouched. There is no retry, streaming or timeout: one
request, one response.
"""

import logging
from typing import Any

import httpx

from src.relay.config import RelayConfig, get_relay_config

logger = logging.getLogger(__name__)

UPSTREAM_ERROR_MESSAGE = "Failed to get response from GROQ API"


class UpstreamError(Exception):
    """Raised when the completion provider cannot be reached or rejects the call."""

    def __init__(self, message: str = UPSTREAM_ERROR_MESSAGE, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CompletionRelay:
    """Forwards conversations to the completion provider.

    Stateless apart from its configuration, so one instance is shared by
    every request.
    """

    def __init__(
        self,
        config: RelayConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the relay.

        Args:
            config: Optional relay configuration.
                    Loads from environment if not provided.
            transport: Optional httpx transport, used to stub the provider.
        """
        self._config = config or get_relay_config()
        self._transport = transport

    @property
    def config(self) -> RelayConfig:
        return self._config

    def build_payload(self, messages: list[Any]) -> dict[str, Any]:
        """Build the provider request body.

        Args:
            messages: Conversation entries, forwarded verbatim.

        Returns:
            JSON-serializable request body with the system prompt first.
        """
        return {
            "model": self._config.model_name,
            "messages": [
                {"role": "system", "content": self._config.system_prompt},
                *messages,
            ],
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
            "top_p": self._config.top_p,
        }

    async def complete(self, messages: list[Any]) -> dict[str, Any]:
        """Send a conversation to the provider.

        Args:
            messages: Conversation entries ({role, content} dicts).

        Returns:
            The provider's JSON response, unmodified.

        Raises:
            UpstreamError: On network failure, non-2xx status or a non-JSON body.
        """
        logger.info(f"Calling completion provider with {len(messages)} messages")
        logger.debug(f"Messages: {messages}")

        async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
            try:
                response = await client.post(
                    self._config.api_url,
                    headers={
                        "Authorization": f"Bearer {self._config.api_key}",
                        "Content-Type": "application/json",
                    },
                    json=self.build_payload(messages),
                )
            except httpx.RequestError as e:
                logger.error(f"Completion provider unreachable: {e}")
                raise UpstreamError() from e

        if not response.is_success:
            logger.error(
                f"Completion provider error ({response.status_code}): {response.text}"
            )
            raise UpstreamError(status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Completion provider returned invalid JSON: {e}")
            raise UpstreamError(status_code=response.status_code) from e

        logger.debug(f"Completion provider response: {data}")
        return data


# Module-level singleton instance
_completion_relay: CompletionRelay | None = None


def get_completion_relay() -> CompletionRelay:
    """Get or create the global completion relay.

    Returns:
        The CompletionRelay instance.

    Raises:
        ValidationError: If the relay configuration is invalid (e.g. no API key).
    """
    global _completion_relay
    if _completion_relay is None:
        _completion_relay = CompletionRelay()
    return _completion_relay
