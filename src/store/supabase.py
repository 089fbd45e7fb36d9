"""Supabase-backed message store.

Talks to the PostgREST API of a hosted Supabase project with httpx. Every
call carries the project anon key and the user's access token, so the
table's row-level security policies apply.
"""

import logging

import httpx

from src.models.schemas import Session, StoredMessage
from src.store.base import StoreError

logger = logging.getLogger(__name__)

MESSAGES_TABLE = "messages"


class SupabaseMessageStore:
    """Reads and writes the ``messages`` table over PostgREST."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        table: str = MESSAGES_TABLE,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            url: Supabase project URL (e.g. https://xyz.supabase.co).
            anon_key: Public anon key of the project.
            table: Table holding the messages.
            transport: Optional httpx transport, used to stub the backend.
        """
        self._endpoint = f"{url.rstrip('/')}/rest/v1/{table}"
        self._anon_key = anon_key
        self._transport = transport

    def _headers(self, session: Session) -> dict[str, str]:
        return {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {session.access_token}",
            "Content-Type": "application/json",
        }

    async def list_messages(self, session: Session) -> list[StoredMessage]:
        """Fetch the user's messages ordered by creation time.

        Raises:
            StoreError: If the request fails, returns a non-2xx status, or the
                body is not a list of message rows.
        """
        params = {
            "select": "*",
            "user_id": f"eq.{session.user_id}",
            "order": "created_at.asc",
        }
        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.get(
                    self._endpoint, params=params, headers=self._headers(session)
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise StoreError(
                    f"Loading messages failed: HTTP {e.response.status_code}"
                ) from e
            except httpx.RequestError as e:
                raise StoreError(f"Loading messages failed: {e}") from e

        # ValidationError is a ValueError; a non-list body surfaces as TypeError.
        try:
            rows = [StoredMessage.model_validate(row) for row in response.json()]
        except (ValueError, TypeError) as e:
            raise StoreError(f"Loading messages failed: unreadable response ({e})") from e
        logger.debug(f"Loaded {len(rows)} messages for user {session.user_id}")
        return rows

    async def insert_message(self, session: Session, message: StoredMessage) -> None:
        """Insert one message row.

        Raises:
            StoreError: If the request fails or returns a non-2xx status.
        """
        row = message.model_dump(mode="json", exclude_none=True)
        headers = self._headers(session) | {"Prefer": "return=minimal"}
        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.post(self._endpoint, json=row, headers=headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise StoreError(
                    f"Inserting message failed: HTTP {e.response.status_code}"
                ) from e
            except httpx.RequestError as e:
                raise StoreError(f"Inserting message failed: {e}") from e
