# hyroxbox/core/deps.py
"""
Common FastAPI dependencies:

- DB session (`get_session`)
- Current user (`get_current_user`)
- Optional current user (`get_current_user_optional`)
- Admin guard (`require_admin`)
- Jinja2 templates helper (`templates`)
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator, Optional

from fastapi import HTTPException, Request
from fastapi.templating import Jinja2Templates
from sqlmodel import Session

from hyroxbox.core.config import get_settings
from hyroxbox.core.security import COOKIE_NAME, load_session
from hyroxbox.db.session import get_engine
from hyroxbox.services.auth_provider import AuthUser

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _format_won(value: Optional[int]) -> str:
    """1500000 -> '1,500,000원'; empty for None."""
    if value is None:
        return ""
    return f"{value:,}원"


templates.env.filters["won"] = _format_won


def get_session() -> Generator[Session, None, None]:
    """
    Provide a SQLModel session for each request.

    This is a thin wrapper around the shared engine from hyroxbox.db.session.
    """
    engine = get_engine()
    with Session(engine) as session:
        yield session


def get_current_user_optional(request: Request) -> Optional[AuthUser]:
    """Return the signed-in user from the session cookie, or None for guests."""
    data = load_session(request.cookies.get(COOKIE_NAME))
    if data is None:
        return None
    return AuthUser(id=str(data["uid"]), email=str(data["email"]))


def get_current_user(request: Request) -> AuthUser:
    """
    Strict current user dependency.

    Raises 401; the app-level handler turns that into a redirect to the
    login page for browser requests.
    """
    user = get_current_user_optional(request)
    if user is None:
        raise HTTPException(status_code=401, detail="Not logged in")
    return user


def require_admin(user: AuthUser) -> AuthUser:
    """
    Guard: only admins are allowed.

    With ADMIN_EMAILS unset every signed-in user counts as an admin.
    """
    allowed = get_settings().admin_emails
    if allowed and user.email.lower() not in allowed:
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return user
