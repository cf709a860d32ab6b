from __future__ import annotations

import time

import pytest
from flask import Flask
from flask.testing import FlaskClient
from itsdangerous import TimestampSigner

from cryptodash.interfaces.http.session import safe_redirect
from cryptodash.tests.fakes import InMemoryUserRepository, session_cookie_headers


def _register_and_login(client: FlaskClient, remember: bool) -> object:
    client.post(
        "/register", data={"email": "a@x.com", "username": "alice", "password": "longenough"}
    )
    client.post("/logout")
    form = {"usernameOrEmail": "alice", "password": "longenough"}
    if remember:
        form["remember"] = "on"
    return client.post("/login", data=form)


def _current_username(client: FlaskClient) -> str | None:
    user = client.get("/").get_json()["user"]
    return user["username"] if user else None


def test_remembered_session_is_persistent(client: FlaskClient) -> None:
    response = _register_and_login(client, remember=True)

    (cookie,) = session_cookie_headers(response)
    assert "Expires=" in cookie
    assert "HttpOnly" in cookie
    assert "SameSite=Lax" in cookie
    assert _current_username(client) == "alice"


def test_unremembered_session_is_browser_scoped(client: FlaskClient) -> None:
    response = _register_and_login(client, remember=False)

    (cookie,) = session_cookie_headers(response)
    assert "Expires=" not in cookie
    assert "Max-Age=" not in cookie
    assert _current_username(client) == "alice"


def test_remembered_cookie_survives_a_new_client(app: Flask, client: FlaskClient) -> None:
    _register_and_login(client, remember=True)
    stored = client.get_cookie("__session").value

    fresh = app.test_client()
    fresh.set_cookie("__session", stored)

    assert _current_username(fresh) == "alice"


def test_tampered_cookie_is_treated_as_signed_out(client: FlaskClient) -> None:
    _register_and_login(client, remember=True)
    value = client.get_cookie("__session").value
    client.set_cookie("__session", value[:-2] + ("AA" if not value.endswith("AA") else "BB"))

    response = client.get("/")

    assert response.status_code == 200
    assert response.get_json()["user"] is None


def test_expired_cookie_is_treated_as_signed_out(
    client: FlaskClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    eight_days_ago = int(time.time()) - 8 * 24 * 60 * 60
    monkeypatch.setattr(TimestampSigner, "get_timestamp", lambda self: eight_days_ago)
    _register_and_login(client, remember=True)
    monkeypatch.undo()

    assert _current_username(client) is None


def test_removed_user_is_signed_out(client: FlaskClient, users: InMemoryUserRepository) -> None:
    _register_and_login(client, remember=True)
    users.users.clear()

    assert _current_username(client) is None


def test_store_fault_folds_to_signed_out(client: FlaskClient, users: InMemoryUserRepository) -> None:
    _register_and_login(client, remember=True)
    users.fail = True

    response = client.get("/")

    assert response.status_code == 200
    assert response.get_json()["user"] is None


def test_api_requires_session(client: FlaskClient) -> None:
    response = client.get("/api/tokens")

    assert response.status_code == 401
    assert response.get_json() == {"errors": {"form": ["Authentication required"]}}


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        (None, "/"),
        ("", "/"),
        ("/dashboard", "/dashboard"),
        ("/a?b=c", "/a?b=c"),
        ("https://evil.example.com/", "/"),
        ("//evil.example.com", "/"),
        ("/\\evil.example.com", "/"),
        ("relative/path", "/"),
    ],
)
def test_safe_redirect(target: str | None, expected: str) -> None:
    assert safe_redirect(target) == expected
