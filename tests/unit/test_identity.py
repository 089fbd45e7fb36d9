"""Unit tests for the identity providers."""

import base64
import hashlib
import json
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
import pytest_check as check

from src.auth.provider import AuthError, AuthEvent, IdentityProvider
from src.auth.supabase import SupabaseIdentityProvider
from src.models.schemas import Session, SessionUser

SUPABASE_URL = "https://project.supabase.co"


class TestIdentityProvider:
    def test_subscribers_receive_changes(self, session: Session) -> None:
        """Test that subscribers get sign-in and sign-out events."""
        identity = IdentityProvider()
        events: list[tuple[AuthEvent, Session | None]] = []
        identity.on_auth_state_change(lambda event, s: events.append((event, s)))

        identity.set_session(session)
        identity.sign_out()

        assert events == [(AuthEvent.SIGNED_IN, session), (AuthEvent.SIGNED_OUT, None)]

    def test_unsubscribe_stops_notifications(self, session: Session) -> None:
        """Test that unsubscribed callbacks are not called."""
        identity = IdentityProvider()
        events: list[AuthEvent] = []
        subscription = identity.on_auth_state_change(lambda event, s: events.append(event))

        subscription.unsubscribe()
        subscription.unsubscribe()
        identity.set_session(session)

        check.equal(events, [])
        check.equal(identity.get_session(), session)

    def test_sign_out_without_session_is_silent(self) -> None:
        """Test that signing out with no session emits nothing."""
        identity = IdentityProvider()
        events: list[AuthEvent] = []
        identity.on_auth_state_change(lambda event, s: events.append(event))

        identity.sign_out()

        assert events == []


class TestSupabaseIdentityProvider:
    def test_oauth_url_uses_pkce(self) -> None:
        """Test the authorize URL and its S256 code challenge."""
        identity = SupabaseIdentityProvider(SUPABASE_URL, "anon-key")

        redirect = identity.sign_in_with_oauth("github", "http://localhost:8000/auth/callback")

        url = urlparse(redirect.url)
        query = parse_qs(url.query)
        digest = hashlib.sha256(redirect.code_verifier.encode()).digest()
        expected = base64.urlsafe_b64encode(digest).rstrip(b"=").decode()
        check.equal(url.path, "/auth/v1/authorize")
        check.equal(query["provider"], ["github"])
        check.equal(query["redirect_to"], ["http://localhost:8000/auth/callback"])
        check.equal(query["code_challenge"], [expected])
        check.equal(query["code_challenge_method"], ["s256"])

    async def test_exchange_code_sets_session(self) -> None:
        """Test that a code exchange stores and announces the session."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"access_token": "jwt-1", "token_type": "bearer", "user": {"id": "u-1"}},
            )

        identity = SupabaseIdentityProvider(
            SUPABASE_URL, "anon-key", transport=httpx.MockTransport(handler)
        )
        events: list[AuthEvent] = []
        identity.on_auth_state_change(lambda event, s: events.append(event))

        session = await identity.exchange_code_for_session("code-1", "verifier-1")

        check.equal(session, Session(user=SessionUser(id="u-1"), access_token="jwt-1"))
        check.equal(identity.get_session(), session)
        check.equal(events, [AuthEvent.SIGNED_IN])
        request = seen[0]
        check.equal(request.url.params["grant_type"], "pkce")
        check.equal(
            json.loads(request.content), {"auth_code": "code-1", "code_verifier": "verifier-1"}
        )

    async def test_rejected_code_raises(self) -> None:
        """Test that a rejected code raises AuthError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))
        identity = SupabaseIdentityProvider(SUPABASE_URL, "anon-key", transport=transport)

        with pytest.raises(AuthError, match="HTTP 400"):
            await identity.exchange_code_for_session("bad", "verifier")
        assert identity.get_session() is None

    async def test_restore_session_validates_token(self) -> None:
        """Test that a stored token is checked against the user endpoint."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "u-9", "email": "a@b.c"})

        identity = SupabaseIdentityProvider(
            SUPABASE_URL, "anon-key", transport=httpx.MockTransport(handler)
        )

        session = await identity.restore_session("jwt-9")

        check.equal(session.user_id, "u-9")
        check.equal(seen[0].url.path, "/auth/v1/user")
        check.equal(seen[0].headers["authorization"], "Bearer jwt-9")

    async def test_sign_out_remote_clears_even_on_failure(self, session: Session) -> None:
        """Test that a failed logout call still clears the session."""
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        identity = SupabaseIdentityProvider(
            SUPABASE_URL, "anon-key", session=session, transport=transport
        )

        await identity.sign_out_remote()

        assert identity.get_session() is None
