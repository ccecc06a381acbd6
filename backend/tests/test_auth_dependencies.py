import pathlib
import sys
from datetime import timedelta

import pytest
from fastapi import HTTPException, Response


ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import backend.main as backend_main
from backend.app.users import LoginIdentity, User


def _user(user_id: str = "123") -> User:
    return User(id=user_id, discord_id="998877", username="alice")


def test_resolve_session_invalid_token_returns_none():
    assert backend_main.resolve_user_from_session_token("not-a-valid-token") is None


def test_resolve_session_expired_token_returns_none(monkeypatch):
    expired_token = backend_main.create_access_token(
        subject="42", expires_delta=timedelta(minutes=-5)
    )

    def _unexpected_get_user_by_id(_uid: str):
        raise AssertionError("get_user_by_id should not be called for expired tokens")

    monkeypatch.setattr(backend_main, "get_user_by_id", _unexpected_get_user_by_id)

    assert backend_main.resolve_user_from_session_token(expired_token) is None


def test_get_current_user_valid_token_returns_user(monkeypatch):
    user = _user()

    monkeypatch.setattr(backend_main, "get_user_by_id", lambda uid: user if uid == "123" else None)

    token = backend_main.create_access_token(subject=user.id)

    result = backend_main.get_current_user(token)

    assert result is user


def test_get_current_user_rejects_expired_token():
    expired_token = backend_main.create_access_token(
        subject="42", expires_delta=timedelta(minutes=-5)
    )

    with pytest.raises(HTTPException) as excinfo:
        backend_main.get_current_user(expired_token)

    assert excinfo.value.status_code == 401


def test_get_current_user_requires_session():
    with pytest.raises(HTTPException) as excinfo:
        backend_main.get_current_user(None)

    assert excinfo.value.status_code == 401
    assert excinfo.value.detail == "Not authenticated"


def test_get_current_user_rejects_unknown_subject(monkeypatch):
    monkeypatch.setattr(backend_main, "get_user_by_id", lambda _uid: None)
    token = backend_main.create_access_token(subject="404")

    with pytest.raises(HTTPException) as excinfo:
        backend_main.get_current_user(token)

    assert excinfo.value.status_code == 401


def test_establish_session_sets_cookie_for_registered_user(monkeypatch):
    user = _user("7")
    captured = {}

    class _FakeUserService:
        def register_login(self, identity: LoginIdentity) -> User:
            captured["identity"] = identity
            return user

    monkeypatch.setattr(backend_main, "get_user_service", lambda: _FakeUserService())
    monkeypatch.setattr(backend_main, "get_user_by_id", lambda uid: user if uid == "7" else None)

    response = Response()
    identity = LoginIdentity(discord_id="998877", username="alice")

    result = backend_main.establish_session(response, identity)

    assert result is user
    assert captured["identity"] == identity
    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"{backend_main.SESSION_COOKIE_NAME}=")
    assert "httponly" in cookie.lower()

    token = cookie.split(";", 1)[0].split("=", 1)[1]
    assert backend_main.get_current_user(token) is user


def test_app_context_uses_registered_connection_factory():
    from backend import app_context

    assert app_context._get_conn is backend_main.get_conn
