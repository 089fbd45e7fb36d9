"""Conversation controller and its collaborators.

Responsibilities:
    - Session tracking with subscribe/unsubscribe lifecycle
    - Loading the persisted thread on sign-in
    - Optimistic append, persistence and relay round-trip on send
    - Typed send results instead of swallowed exceptions

Contains no UI code; the NiceGUI page only renders controller state.
"""

from src.auth.provider import IdentityProvider
from src.auth.supabase import SupabaseIdentityProvider
from src.controller.config import WidgetConfig, get_widget_config
from src.controller.conversation import ConversationController
from src.controller.relay_client import RelayClient, RelayClientError, extract_reply
from src.store.base import MessageStore
from src.store.memory import InMemoryMessageStore
from src.store.supabase import SupabaseMessageStore

# Shared by every client in memory mode so history survives page reloads
_memory_store: InMemoryMessageStore | None = None


def create_identity_provider(config: WidgetConfig) -> IdentityProvider:
    """Create a fresh identity provider for one UI client."""
    if config.uses_supabase:
        return SupabaseIdentityProvider(config.supabase_url, config.supabase_anon_key)
    return IdentityProvider()


def create_message_store(config: WidgetConfig) -> MessageStore:
    """Create the message store selected by the configuration."""
    global _memory_store
    if config.uses_supabase:
        return SupabaseMessageStore(config.supabase_url, config.supabase_anon_key)
    if _memory_store is None:
        _memory_store = InMemoryMessageStore()
    return _memory_store


def create_controller(
    config: WidgetConfig, identity: IdentityProvider
) -> ConversationController:
    """Wire a controller to the configured store and relay."""
    return ConversationController(
        identity=identity,
        store=create_message_store(config),
        relay=RelayClient(config.relay_url),
    )


__all__ = [
    "ConversationController",
    "RelayClient",
    "RelayClientError",
    "WidgetConfig",
    "create_controller",
    "create_identity_provider",
    "create_message_store",
    "extract_reply",
    "get_widget_config",
]
