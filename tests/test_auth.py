from types import SimpleNamespace

import httpx

from hyroxbox.core.errors import AuthProviderError
from hyroxbox.core.security import COOKIE_NAME, dump_session, load_session
from hyroxbox.services.auth_provider import AuthUser


def _signup(client, password="secret1", confirm=None, email="new@example.com"):
    return client.post(
        "/auth/signup",
        data={
            "email": email,
            "password": password,
            "confirm_password": password if confirm is None else confirm,
        },
    )


# ------------------------------ session cookie ------------------------------


def test_session_cookie_roundtrip():
    token = dump_session("uid-1", "a@example.com")
    data = load_session(token)
    assert data["uid"] == "uid-1"
    assert data["email"] == "a@example.com"


def test_session_cookie_rejects_tampering():
    token = dump_session("uid-1", "a@example.com")
    assert load_session(token + "x") is None
    assert load_session("garbage") is None
    assert load_session(None) is None


# ------------------------------ sign up ------------------------------


def test_signup_page(anon_client):
    res = anon_client.get("/auth/signup")
    assert res.status_code == 200
    assert 'name="confirm_password"' in res.text


def test_signup_success(anon_client, monkeypatch):
    calls = []
    monkeypatch.setattr(
        "hyroxbox.services.auth_provider.sign_up",
        lambda email, password, redirect_to: calls.append((email, password, redirect_to)),
    )

    res = _signup(anon_client, email=" new@example.com ")
    assert res.status_code == 200
    assert "이메일을 확인하여" in res.text
    assert calls == [("new@example.com", "secret1", "http://localhost:8000/auth/login")]


def test_signup_password_mismatch(anon_client, monkeypatch):
    calls = []
    monkeypatch.setattr(
        "hyroxbox.services.auth_provider.sign_up", lambda *a, **k: calls.append(a)
    )

    res = _signup(anon_client, password="secret1", confirm="secret2")
    assert res.status_code == 400
    assert "Passwords do not match" in res.text
    assert calls == []


def test_signup_short_password(anon_client, monkeypatch):
    calls = []
    monkeypatch.setattr(
        "hyroxbox.services.auth_provider.sign_up", lambda *a, **k: calls.append(a)
    )

    res = _signup(anon_client, password="12345")
    assert res.status_code == 400
    assert "Password must be at least 6 characters" in res.text
    assert calls == []


def test_signup_provider_error(anon_client, monkeypatch):
    def reject(*_args, **_kwargs):
        raise AuthProviderError("User already registered")

    monkeypatch.setattr("hyroxbox.services.auth_provider.sign_up", reject)

    res = _signup(anon_client)
    assert res.status_code == 400
    assert "User already registered" in res.text
    assert 'value="new@example.com"' in res.text


# ------------------------------ login ------------------------------


def test_login_sets_cookie_and_redirects(anon_client, monkeypatch):
    monkeypatch.setattr(
        "hyroxbox.services.auth_provider.sign_in",
        lambda email, password: AuthUser(id="uid-9", email=email),
    )

    res = anon_client.post(
        "/auth/login",
        data={"email": "admin@example.com", "password": "secret1", "next_url": "/admin/boxes"},
        follow_redirects=False,
    )
    assert res.status_code == 303
    assert res.headers["location"] == "/admin/boxes"
    assert COOKIE_NAME in res.cookies

    me = anon_client.get("/auth/me")
    assert me.json() == {"id": "uid-9", "email": "admin@example.com"}


def test_login_ignores_external_next(anon_client, monkeypatch):
    monkeypatch.setattr(
        "hyroxbox.services.auth_provider.sign_in",
        lambda email, password: AuthUser(id="uid-9", email=email),
    )

    res = anon_client.post(
        "/auth/login",
        data={"email": "a@example.com", "password": "pw", "next_url": "//evil.example"},
        follow_redirects=False,
    )
    assert res.headers["location"] == "/admin"


def test_login_failure(anon_client, monkeypatch):
    def reject(*_args, **_kwargs):
        raise AuthProviderError("Invalid login credentials")

    monkeypatch.setattr("hyroxbox.services.auth_provider.sign_in", reject)

    res = anon_client.post(
        "/auth/login", data={"email": "a@example.com", "password": "wrong"}
    )
    assert res.status_code == 401
    assert "Invalid login credentials" in res.text
    assert COOKIE_NAME not in res.cookies


def test_login_page_redirects_signed_in_user(client):
    res = client.get("/auth/login?next=/admin/regions", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/admin/regions"


def test_me_requires_login(anon_client):
    res = anon_client.get("/auth/me", headers={"Accept": "application/json"})
    assert res.status_code == 401


def test_logout_clears_cookie(anon_client):
    anon_client.cookies.set(COOKIE_NAME, dump_session("uid-1", "a@example.com"))

    res = anon_client.get("/auth/logout", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/"
    set_cookie = res.headers["set-cookie"]
    assert set_cookie.startswith(f"{COOKIE_NAME}=")
    assert "Max-Age=0" in set_cookie


# ------------------------------ provider outage ------------------------------


def _unreachable(*_args, **_kwargs):
    raise httpx.ConnectError("connection refused")


def _offline_client(monkeypatch):
    fake = SimpleNamespace(
        auth=SimpleNamespace(sign_up=_unreachable, sign_in_with_password=_unreachable)
    )
    monkeypatch.setattr("hyroxbox.services.auth_provider._client", fake)


def test_signup_provider_unreachable(anon_client, monkeypatch):
    _offline_client(monkeypatch)

    res = _signup(anon_client)
    assert res.status_code == 400
    assert "An unexpected error occurred" in res.text


def test_login_provider_unreachable(anon_client, monkeypatch):
    _offline_client(monkeypatch)

    res = anon_client.post(
        "/auth/login", data={"email": "a@example.com", "password": "secret1"}
    )
    assert res.status_code == 401
    assert "An unexpected error occurred" in res.text
    assert COOKIE_NAME not in res.cookies
