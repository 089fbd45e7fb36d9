"""Persistence port for chat messages."""

from typing import Protocol

from src.models.schemas import Session, StoredMessage


class StoreError(Exception):
    """Raised when the message store cannot be read or written."""

    pass


class MessageStore(Protocol):
    """Repository protocol for persisted chat messages."""

    async def list_messages(self, session: Session) -> list[StoredMessage]:
        """List the signed-in user's messages, oldest first."""
        ...

    async def insert_message(self, session: Session, message: StoredMessage) -> None:
        """Persist a single message row."""
        ...
