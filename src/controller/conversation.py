"""Conversation controller: owns the visible thread for one signed-in user.

One controller exists per UI client. It is an explicit context object rather
than global state: the page creates it, calls ``start()`` on mount and
``close()`` on teardown, and re-renders whenever a change listener fires.

Send sequence:
    1. Append the user's message to the visible list (optimistic update).
    2. Persist it.
    3. Replay the full history plus the new message to the completion relay.
    4. Append and persist the assistant's reply.

The visible list and the store are dual-written with no transaction. A failed
relay call leaves the user's message in place with no reply, and the failure
is reported through ``SendResult`` instead of being raised.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol

from src.auth.provider import AuthEvent, IdentityProvider, Subscription
from src.controller.relay_client import extract_reply
from src.models.schemas import (
    ChatMessage,
    Message,
    SendResult,
    SendStatus,
    Session,
    StoredMessage,
)
from src.store.base import MessageStore, StoreError

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], None]

SESSION_CHANGED_ERROR = "Session changed before the reply arrived"


class CompletionClient(Protocol):
    async def complete(
        self, messages: list[ChatMessage], access_token: str
    ) -> dict[str, Any]: ...


class ConversationController:
    """Message list, loading flag and session for one chat widget."""

    def __init__(
        self,
        identity: IdentityProvider,
        store: MessageStore,
        relay: CompletionClient,
    ) -> None:
        self._identity = identity
        self._store = store
        self._relay = relay

        self._messages: list[Message] = []
        self._session: Session | None = None
        self._is_loading = False
        self._in_flight = False
        self._last_error: str | None = None

        self._subscription: Subscription | None = None
        self._listeners: list[ChangeListener] = []
        self._tasks: set[asyncio.Task] = set()

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def last_error(self) -> str | None:
        return self._last_error

    # === Lifecycle ===

    async def start(self) -> None:
        """Pick up the current session, subscribe to changes and load history."""
        if self._subscription is None:
            self._subscription = self._identity.on_auth_state_change(
                self._on_auth_state_change
            )
        self._session = self._identity.get_session()
        self._notify()
        await self.load_history()

    def close(self) -> None:
        """Unsubscribe from identity changes. Safe to call more than once."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()
        self._listeners.clear()

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a listener fired after every state change.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _on_auth_state_change(self, event: AuthEvent, session: Session | None) -> None:
        previous_user = self._session.user_id if self._session else None
        self._session = session
        logger.info(f"Auth state changed: {event.value}")

        if session is None:
            self._messages.clear()
            self._notify()
            return

        self._notify()
        if session.user_id != previous_user:
            self._schedule(self.load_history())

    def _schedule(self, coro: Any) -> None:
        try:
            task = asyncio.get_running_loop().create_task(coro)
        except RuntimeError:
            coro.close()
            logger.warning("No running event loop; history reload skipped")
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_for_pending(self) -> None:
        """Wait until scheduled history reloads have finished."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    # === Persistence ===

    async def load_history(self) -> None:
        """Replace the visible list with the persisted thread, oldest first.

        No-op without a session. A store failure is logged and leaves the
        visible list unchanged.
        """
        session = self._session
        if session is None:
            return

        try:
            rows = await self._store.list_messages(session)
        except StoreError as e:
            logger.error(f"Error loading messages: {e}")
            return

        self._messages = [row.to_message() for row in rows]
        logger.info(f"Loaded {len(self._messages)} messages for user {session.user_id}")
        self._notify()

    async def _persist(self, session: Session, message: Message) -> None:
        row = StoredMessage(content=message.text, is_ai=message.is_ai, user_id=session.user_id)
        try:
            await self._store.insert_message(session, row)
        except StoreError as e:
            # The exchange continues; the visible list and store diverge.
            logger.error(f"Error saving message: {e}")

    # === Sending ===

    def _same_user(self, session: Session) -> bool:
        current = self._session
        return current is not None and current.user_id == session.user_id

    async def send(self, text: str) -> SendResult:
        """Submit user text and wait for the assistant's reply.

        Args:
            text: Raw composer text; surrounding whitespace is trimmed.

        Returns:
            SendResult describing what happened. Exceptions from the relay
            are logged and reported as ``failed``, never raised.
        """
        text = text.strip()
        if not text:
            return SendResult(status=SendStatus.IGNORED_EMPTY)

        session = self._session
        if session is None:
            logger.error("User must be logged in to send messages")
            return SendResult(status=SendStatus.NO_SESSION)

        if self._in_flight:
            logger.warning("Send rejected: a request is already in flight")
            return SendResult(status=SendStatus.BUSY)

        self._in_flight = True
        self._is_loading = True
        self._last_error = None
        try:
            history = [m.to_chat_message() for m in self._messages]

            user_message = Message(text=text, is_ai=False)
            self._messages.append(user_message)
            self._notify()
            await self._persist(session, user_message)

            history.append(user_message.to_chat_message())
            data = await self._relay.complete(history, session.access_token)
            reply_text = extract_reply(data)

            if not self._same_user(session):
                logger.warning("Session changed while waiting for the reply; reply dropped")
                self._last_error = SESSION_CHANGED_ERROR
                return SendResult(status=SendStatus.FAILED, error=SESSION_CHANGED_ERROR)

            reply = Message(text=reply_text, is_ai=True)
            self._messages.append(reply)
            self._notify()
            await self._persist(session, reply)

            return SendResult(status=SendStatus.SENT, reply=reply)
        except Exception as e:
            logger.exception(f"Error in chat: {e}")
            self._last_error = str(e)
            return SendResult(status=SendStatus.FAILED, error=str(e))
        finally:
            self._in_flight = False
            self._is_loading = False
            self._notify()
