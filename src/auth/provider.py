"""Session holder with auth-state subscriptions."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from src.models.schemas import Session

logger = logging.getLogger(__name__)


class AuthEvent(str, Enum):
    """Kind of session change delivered to auth-state subscribers."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


AuthStateCallback = Callable[[AuthEvent, Session | None], None]


class AuthError(Exception):
    """Raised when the identity provider rejects a sign-in or token."""

    pass


@dataclass
class Subscription:
    """Handle returned by ``on_auth_state_change``."""

    provider: "IdentityProvider"
    callback: AuthStateCallback

    def unsubscribe(self) -> None:
        """Stop delivering auth events to the callback."""
        self.provider._remove_listener(self.callback)


class IdentityProvider:
    """Holds the current session and pushes changes to subscribers.

    Subclasses talk to a real identity service; this base class is enough
    for local development and tests, where sessions are set directly.
    """

    def __init__(self, session: Session | None = None) -> None:
        self._session = session
        self._listeners: list[AuthStateCallback] = []

    def get_session(self) -> Session | None:
        return self._session

    def set_session(self, session: Session, event: AuthEvent = AuthEvent.SIGNED_IN) -> None:
        self._session = session
        logger.info(f"Session set for user {session.user_id}")
        self._notify(event, session)

    def sign_out(self) -> None:
        if self._session is None:
            return
        self._session = None
        self._notify(AuthEvent.SIGNED_OUT, None)

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        """Register a callback for session changes.

        Returns:
            Subscription whose ``unsubscribe()`` removes the callback.
        """
        self._listeners.append(callback)
        return Subscription(provider=self, callback=callback)

    def _remove_listener(self, callback: AuthStateCallback) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, event: AuthEvent, session: Session | None) -> None:
        for listener in list(self._listeners):
            listener(event, session)
