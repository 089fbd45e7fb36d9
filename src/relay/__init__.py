"""Completion relay: forwards conversation history to the LLM provider.

Responsibilities:
    - Provider configuration (model, sampling parameters, system prompt)
    - Prepending the fixed system prompt
    - One synchronous JSON POST per request, response returned verbatim

Kept separate from the HTTP layer so the route only deals with the wire format.
"""

from src.relay.completion import CompletionRelay, UpstreamError, get_completion_relay
from src.relay.config import RelayConfig, get_relay_config

__all__ = [
    "CompletionRelay",
    "RelayConfig",
    "UpstreamError",
    "get_completion_relay",
    "get_relay_config",
]
