from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Roles understood by the completion provider."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single visible chat message.

    Attributes:
        text: The message body.
        is_ai: True when the assistant authored the message.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    is_ai: bool = False

    def to_chat_message(self) -> "ChatMessage":
        role = Role.ASSISTANT if self.is_ai else Role.USER
        return ChatMessage(role=role.value, content=self.text)


class ChatMessage(BaseModel):
    """One entry of a completion request.

    Attributes:
        role: The speaker identifier (user, assistant, or system).
        content: The message text.
    """

    role: str = Field(..., description="Message role: 'user', 'assistant', or 'system'")
    content: str = Field(..., description="The message content")


class StoredMessage(BaseModel):
    """A row of the hosted ``messages`` table.

    ``created_at`` is assigned by the database on insert, so it is optional
    when building a row locally.
    """

    content: str
    is_ai: bool | None = False
    user_id: str
    created_at: datetime | None = None

    def to_message(self) -> Message:
        return Message(text=self.content, is_ai=bool(self.is_ai))


class SessionUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str


class Session(BaseModel):
    """Credential bundle issued by the identity provider.

    Attributes:
        user: The signed-in user.
        access_token: Bearer token forwarded to the store and the relay.
    """

    model_config = ConfigDict(frozen=True)

    user: SessionUser
    access_token: str

    @property
    def user_id(self) -> str:
        return self.user.id


class RelayRequest(BaseModel):
    """Request body accepted by the completion relay.

    Entries are forwarded to the provider verbatim.
    """

    messages: list[Any]


class ErrorEnvelope(BaseModel):
    """Body returned by the relay on any failure."""

    error: str


class SendStatus(str, Enum):
    """Outcome of a conversation send."""

    SENT = "sent"
    IGNORED_EMPTY = "ignored_empty"
    NO_SESSION = "no_session"
    BUSY = "busy"
    FAILED = "failed"


class SendResult(BaseModel):
    """Result of ``ConversationController.send``.

    Attributes:
        status: What happened to the submission.
        reply: The assistant message appended on success.
        error: Failure description when status is ``failed``.
    """

    status: SendStatus
    reply: Message | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is SendStatus.SENT
