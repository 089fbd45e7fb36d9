"""Supabase Auth (GoTrue) identity provider.

OAuth sign-in uses the PKCE flow: ``sign_in_with_oauth`` produces the
authorize URL plus a code verifier, and ``exchange_code_for_session`` trades
the ``code`` query parameter of the callback for a session.
"""

import base64
import hashlib
import logging
import secrets
from typing import Any, NamedTuple
from urllib.parse import urlencode

import httpx

from src.auth.provider import AuthError, AuthEvent, IdentityProvider
from src.models.schemas import Session, SessionUser

logger = logging.getLogger(__name__)


class OAuthRedirect(NamedTuple):
    url: str
    code_verifier: str


def _code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def _session_from_token_response(data: dict[str, Any]) -> Session:
    try:
        return Session(
            user=SessionUser(id=data["user"]["id"]),
            access_token=data["access_token"],
        )
    except (KeyError, TypeError) as e:
        raise AuthError(f"Malformed token response: missing {e}") from e


class SupabaseIdentityProvider(IdentityProvider):
    """Identity provider backed by a hosted Supabase project."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        session: Session | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(session)
        self._auth_url = f"{url.rstrip('/')}/auth/v1"
        self._anon_key = anon_key
        self._transport = transport

    def sign_in_with_oauth(self, provider: str, redirect_to: str) -> OAuthRedirect:
        """Build the OAuth authorize URL for ``provider``.

        Args:
            provider: OAuth provider name, e.g. ``github``.
            redirect_to: Callback URL that receives the ``code`` parameter.

        Returns:
            The URL to send the browser to and the verifier to keep until the callback.
        """
        verifier = secrets.token_urlsafe(64)
        query = urlencode({
            "provider": provider,
            "redirect_to": redirect_to,
            "code_challenge": _code_challenge(verifier),
            "code_challenge_method": "s256",
        })
        return OAuthRedirect(url=f"{self._auth_url}/authorize?{query}", code_verifier=verifier)

    async def exchange_code_for_session(self, code: str, code_verifier: str) -> Session:
        """Trade an OAuth callback code for a session and make it current.

        Raises:
            AuthError: If the code is rejected or the service is unreachable.
        """
        data = await self._request(
            "POST",
            "/token",
            params={"grant_type": "pkce"},
            json={"auth_code": code, "code_verifier": code_verifier},
        )
        session = _session_from_token_response(data)
        self.set_session(session, AuthEvent.SIGNED_IN)
        return session

    async def restore_session(self, access_token: str) -> Session:
        """Validate a stored access token and make its session current.

        Raises:
            AuthError: If the token is no longer valid.
        """
        data = await self._request("GET", "/user", token=access_token)
        if not data.get("id"):
            raise AuthError("Malformed user response: missing id")
        session = Session(user=SessionUser(id=data["id"]), access_token=access_token)
        self.set_session(session, AuthEvent.SIGNED_IN)
        return session

    async def sign_out_remote(self) -> None:
        """Revoke the current token, then clear the local session."""
        session = self.get_session()
        if session is not None:
            try:
                await self._request("POST", "/logout", token=session.access_token)
            except AuthError as e:
                logger.warning(f"Remote sign-out failed: {e}")
        self.sign_out()

    async def _request(
        self,
        method: str,
        path: str,
        token: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        headers = {"apikey": self._anon_key}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.request(
                    method, f"{self._auth_url}{path}", headers=headers, **kwargs
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise AuthError(
                    f"Auth request {path} failed: HTTP {e.response.status_code}"
                ) from e
            except httpx.RequestError as e:
                raise AuthError(f"Auth request {path} failed: {e}") from e
        if not response.content:
            return {}
        return response.json()
