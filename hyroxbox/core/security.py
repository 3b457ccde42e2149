"""
Session cookie helpers.

After the identity provider confirms a sign-in we store a small signed
payload ({"uid", "email", "ts"}) in an httponly cookie. The signature
prevents tampering; nothing secret is kept in the payload.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from itsdangerous import BadSignature, URLSafeSerializer

from hyroxbox.core.config import get_settings

COOKIE_NAME = "hyroxbox_session"
COOKIE_MAX_AGE = 60 * 60 * 24 * 30  # 30 days


def _serializer() -> URLSafeSerializer:
    return URLSafeSerializer(get_settings().SECRET_KEY, salt="session")


def dump_session(uid: str, email: str) -> str:
    """Return the signed cookie value for a signed-in provider user."""
    return _serializer().dumps(
        {"uid": uid, "email": email, "ts": datetime.now(timezone.utc).timestamp()}
    )


def load_session(token: Optional[str]) -> Optional[dict]:
    """
    Decode a cookie value produced by dump_session().

    Returns None for a missing, malformed or forged token.
    """
    if not token:
        return None
    try:
        data = _serializer().loads(token)
    except BadSignature:
        return None
    if not isinstance(data, dict) or not data.get("uid") or not data.get("email"):
        return None
    return data
