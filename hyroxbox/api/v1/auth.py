from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from hyroxbox.core.config import get_settings
from hyroxbox.core.deps import get_current_user, get_current_user_optional, templates
from hyroxbox.core.errors import AuthProviderError
from hyroxbox.core.security import COOKIE_MAX_AGE, COOKIE_NAME, dump_session
from hyroxbox.services import auth_provider
from hyroxbox.services.auth_provider import AuthUser

router = APIRouter()

MIN_PASSWORD_LENGTH = 6


def _safe_next(next_url: Optional[str]) -> str:
    """Only allow local redirect targets ("/admin", not "https://...")."""
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return "/admin"


# ---------------------- SIGN UP (GET) ----------------------
@router.get("/auth/signup", response_class=HTMLResponse)
def signup_page(request: Request):
    """Render the sign-up form."""
    return templates.TemplateResponse(
        request,
        "auth/signup.html",
        {"error": None, "success": False, "email_value": ""},
    )


# ---------------------- SIGN UP (POST) ----------------------
@router.post("/auth/signup", response_class=HTMLResponse)
def signup_submit(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    confirm_password: str = Form(...),
):
    """
    Register an account with the identity provider.

    Local checks (matching passwords, minimum length) run first; the
    provider is only called when they pass. On success the user has to
    confirm their email before signing in.
    """
    error: Optional[str] = None
    if password != confirm_password:
        error = "Passwords do not match"
    elif len(password) < MIN_PASSWORD_LENGTH:
        error = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"

    if error is None:
        redirect_to = f"{get_settings().SITE_URL.rstrip('/')}/auth/login"
        try:
            auth_provider.sign_up(email.strip(), password, redirect_to=redirect_to)
        except AuthProviderError as exc:
            error = exc.message

    if error is not None:
        return templates.TemplateResponse(
            request,
            "auth/signup.html",
            {"error": error, "success": False, "email_value": email},
            status_code=400,
        )

    return templates.TemplateResponse(
        request,
        "auth/signup.html",
        {"error": None, "success": True, "email_value": email},
    )


# ---------------------- LOGIN (GET) ----------------------
@router.get("/auth/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    next: Optional[str] = Query(None),
    user: Optional[AuthUser] = Depends(get_current_user_optional),
):
    """
    Render login form.

    Already signed-in users are sent straight on to ?next (or /admin).
    """
    if user is not None:
        return RedirectResponse(url=_safe_next(next), status_code=303)

    return templates.TemplateResponse(
        request,
        "auth/login.html",
        {"error": None, "next": next or "", "email_value": ""},
    )


# ---------------------- LOGIN (POST) ----------------------
@router.post("/auth/login", response_class=HTMLResponse)
def login_submit(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    next_url: Optional[str] = Form(None),
):
    """
    Check credentials with the provider; on failure re-render the form.
    On success set the signed session cookie and redirect.
    """
    try:
        auth_user = auth_provider.sign_in(email.strip(), password)
    except AuthProviderError as exc:
        return templates.TemplateResponse(
            request,
            "auth/login.html",
            {"error": exc.message, "next": next_url or "", "email_value": email},
            status_code=401,
        )

    resp = RedirectResponse(url=_safe_next(next_url), status_code=303)
    resp.set_cookie(
        key=COOKIE_NAME,
        value=dump_session(auth_user.id, auth_user.email),
        httponly=True,
        samesite="lax",
        secure=not get_settings().DEBUG and get_settings().SITE_URL.startswith("https"),
        path="/",
        max_age=COOKIE_MAX_AGE,
    )
    return resp


# ---------------------- LOGOUT ----------------------
@router.get("/auth/logout")
def logout():
    """Remove the session cookie and go back to the listing."""
    resp = RedirectResponse(url="/", status_code=303)
    resp.delete_cookie(COOKIE_NAME, path="/")
    return resp


# ---------------------- WHO AM I ----------------------
@router.get("/auth/me")
def whoami(user: AuthUser = Depends(get_current_user)):
    """Return the user the backend sees as signed in."""
    return {"id": user.id, "email": user.email}
