"""Identity: signed-in session and auth-state notifications.

Providers:
    - IdentityProvider: in-process session holder (development, tests)
    - SupabaseIdentityProvider: Supabase Auth with GitHub OAuth (PKCE)
"""

from src.auth.provider import AuthError, AuthEvent, IdentityProvider, Subscription
from src.auth.supabase import OAuthRedirect, SupabaseIdentityProvider

__all__ = [
    "AuthError",
    "AuthEvent",
    "IdentityProvider",
    "OAuthRedirect",
    "Subscription",
    "SupabaseIdentityProvider",
]
