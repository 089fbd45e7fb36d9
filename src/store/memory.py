"""In-process message store for local development and tests."""

import logging
from datetime import UTC, datetime

from src.models.schemas import Session, StoredMessage

logger = logging.getLogger(__name__)


class InMemoryMessageStore:
    """Keeps rows in a list, stamping ``created_at`` on insert.

    Rows are scoped per user on read, standing in for the row-level
    access policy of the hosted table.
    """

    def __init__(self) -> None:
        self._rows: list[StoredMessage] = []

    @property
    def rows(self) -> list[StoredMessage]:
        return list(self._rows)

    async def list_messages(self, session: Session) -> list[StoredMessage]:
        rows = [row for row in self._rows if row.user_id == session.user_id]
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(rows, key=lambda row: row.created_at)

    async def insert_message(self, session: Session, message: StoredMessage) -> None:
        row = message.model_copy(
            update={"created_at": message.created_at or datetime.now(UTC)}
        )
        self._rows.append(row)
        logger.debug(f"Stored message for user {row.user_id} (is_ai={row.is_ai})")
