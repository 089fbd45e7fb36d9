"""Pydantic models shared by the relay, the controller and the UI.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - Message: Visible chat message (text + sender flag)
    - ChatMessage: Role/content entry sent to the completion provider
    - StoredMessage: Row of the hosted messages table
    - Session: Signed-in user and bearer token
    - RelayRequest / ErrorEnvelope: Completion relay wire format
    - SendResult: Typed outcome of a conversation send
"""

from src.models.schemas import (
    ChatMessage,
    ErrorEnvelope,
    Message,
    RelayRequest,
    Role,
    SendResult,
    SendStatus,
    Session,
    SessionUser,
    StoredMessage,
)

__all__ = [
    "ChatMessage",
    "ErrorEnvelope",
    "Message",
    "RelayRequest",
    "Role",
    "SendResult",
    "SendStatus",
    "Session",
    "SessionUser",
    "StoredMessage",
]
