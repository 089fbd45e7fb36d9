"""Chat widget - a NiceGUI conversation thread backed by an LLM completion relay.

Combines FastAPI for the completion relay, httpx for the provider and
Supabase calls, NiceGUI for the widget, and Pydantic for data validation.

Components:
    - api: Completion relay endpoint
    - relay: Upstream completion provider call
    - controller: Conversation state, persistence and send sequence
    - store: Message persistence backends
    - auth: Session and identity provider
    - ui: Web interface for chat interactions
    - models: Shared schemas
"""

__version__ = "0.1.0"
