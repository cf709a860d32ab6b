from __future__ import annotations

from cryptodash.interfaces.http.dto.auth import LoginForm, RegisterForm
from cryptodash.interfaces.http.dto.markets import HistoryQuery
from cryptodash.shared.errors import validate_form


def test_login_form_defaults() -> None:
    result = validate_form(LoginForm, {"usernameOrEmail": " alice ", "password": "pw"})

    assert result.ok
    assert result.value.username_or_email == "alice"
    assert result.value.redirect_to == "/"
    assert result.value.remember is False


def test_login_form_accepts_checkbox_and_redirect() -> None:
    result = validate_form(
        LoginForm,
        {"usernameOrEmail": "a@x.com", "password": "pw", "remember": "on", "redirectTo": "/x"},
    )

    assert result.ok
    assert result.value.remember is True
    assert result.value.redirect_to == "/x"


def test_login_form_reports_missing_fields() -> None:
    result = validate_form(LoginForm, {})

    assert not result.ok
    assert result.errors == {
        "usernameOrEmail": ["Username or email is required"],
        "password": ["Password is required"],
    }


def test_register_form_messages() -> None:
    result = validate_form(
        RegisterForm, {"email": "not-an-email", "username": "   ", "password": "short"}
    )

    assert result.errors == {
        "email": ["Invalid email address"],
        "username": ["Username is required"],
        "password": ["Password must be at least 8 characters"],
    }
    assert result.to_error().status == 400


def test_register_form_rejects_long_username() -> None:
    result = validate_form(
        RegisterForm, {"email": "a@x.com", "username": "u" * 65, "password": "longenough"}
    )

    assert list(result.errors) == ["username"]


def test_register_form_valid() -> None:
    result = validate_form(
        RegisterForm, {"email": "a@x.com", "username": "alice", "password": "longenough"}
    )

    assert result.ok
    assert result.value.redirect_to == "/"


def test_history_query_days() -> None:
    assert validate_form(HistoryQuery, {}).value.days == 30
    assert validate_form(HistoryQuery, {"days": "365"}).value.days == 365

    invalid = validate_form(HistoryQuery, {"days": "12"})
    assert invalid.errors == {"days": ["Days must be one of 7, 30, 90, 365, 1825"]}


def test_register_form_rejects_at_sign_in_username() -> None:
    result = validate_form(
        RegisterForm, {"email": "b@x.com", "username": "bob@home", "password": "longenough"}
    )

    assert result.errors == {"username": ["Username cannot contain @"]}


def test_register_form_normalizes_email() -> None:
    result = validate_form(
        RegisterForm, {"email": "  Alice@X.COM ", "username": "alice", "password": "longenough"}
    )

    assert result.value.email == "alice@x.com"
