"""
Thin wrapper around Supabase Auth.

Credentials never touch our database: sign-up and sign-in are delegated to
the Supabase project configured via SUPABASE_URL / SUPABASE_ANON_KEY.
New accounts must confirm their email before they can sign in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from supabase import AuthError, Client, create_client

from hyroxbox.core.config import get_settings
from hyroxbox.core.errors import AuthProviderError

log = logging.getLogger(__name__)

# Shown when the provider cannot be reached
UNEXPECTED_ERROR = "An unexpected error occurred"

_client: Optional[Client] = None


@dataclass
class AuthUser:
    id: str
    email: str


def get_client() -> Client:
    """Return the shared Supabase client, creating it on first use."""
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
            raise AuthProviderError("Authentication is not configured")
        _client = create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
        log.info("Supabase client initialized")
    return _client


def sign_up(email: str, password: str, redirect_to: str) -> None:
    """
    Register an account by email/password.

    Succeeds silently; the provider then sends a confirmation email whose
    link points at `redirect_to`.
    """
    client = get_client()
    try:
        client.auth.sign_up(
            {
                "email": email,
                "password": password,
                "options": {"email_redirect_to": redirect_to},
            }
        )
    except AuthError as exc:
        log.warning("Sign-up rejected for %s: %s", email, exc.message)
        raise AuthProviderError(exc.message) from exc
    except httpx.HTTPError as exc:
        log.exception("Sign-up request for %s failed", email)
        raise AuthProviderError(UNEXPECTED_ERROR) from exc

    log.info("Sign-up requested for %s", email)


def sign_in(email: str, password: str) -> AuthUser:
    """Verify credentials with the provider and return the signed-in user."""
    client = get_client()
    try:
        response = client.auth.sign_in_with_password(
            {"email": email, "password": password}
        )
    except AuthError as exc:
        log.warning("Sign-in rejected for %s: %s", email, exc.message)
        raise AuthProviderError(exc.message) from exc
    except httpx.HTTPError as exc:
        log.exception("Sign-in request for %s failed", email)
        raise AuthProviderError(UNEXPECTED_ERROR) from exc

    user = response.user
    if user is None:
        raise AuthProviderError("Invalid login credentials")

    return AuthUser(id=str(user.id), email=user.email or email)
