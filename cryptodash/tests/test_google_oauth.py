from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from cryptodash.domain.users.exceptions import AuthProviderError
from cryptodash.infrastructure.oauth import GoogleOAuthProvider
from cryptodash.shared.config import OAuthConfig

CONFIG = OAuthConfig(
    GOOGLE_CLIENT_ID="client-id",
    GOOGLE_CLIENT_SECRET="client-secret",
    GOOGLE_AUTH_URL="https://accounts.example.test/auth",
    GOOGLE_TOKEN_URL="https://oauth.example.test/token",
    GOOGLE_USERINFO_URL="https://oauth.example.test/userinfo",
)


def _provider(handler, config: OAuthConfig = CONFIG) -> GoogleOAuthProvider:
    return GoogleOAuthProvider(config, http=httpx.Client(transport=httpx.MockTransport(handler)))


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


def test_initiate_builds_authorization_url() -> None:
    url = _provider(_unreachable).initiate_auth("http://localhost/auth/google", "state-1")

    parts = urlsplit(url)
    query = parse_qs(parts.query)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://accounts.example.test/auth"
    assert query["client_id"] == ["client-id"]
    assert query["redirect_uri"] == ["http://localhost/auth/google"]
    assert query["response_type"] == ["code"]
    assert query["scope"] == ["openid email profile"]
    assert query["state"] == ["state-1"]


def test_initiate_without_credentials_fails() -> None:
    provider = _provider(_unreachable, OAuthConfig(GOOGLE_CLIENT_ID="", GOOGLE_CLIENT_SECRET=""))

    with pytest.raises(AuthProviderError):
        provider.initiate_auth("http://localhost/auth/google", "state-1")


def test_exchange_code_resolves_identity() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/token":
            form = parse_qs(request.content.decode())
            assert form["code"] == ["the-code"]
            assert form["grant_type"] == ["authorization_code"]
            assert form["redirect_uri"] == ["http://cb"]
            return httpx.Response(200, json={"access_token": "at-123", "token_type": "Bearer"})
        assert request.headers["Authorization"] == "Bearer at-123"
        return httpx.Response(
            200, json={"sub": "1234", "email": "Carol@Example.com", "email_verified": True}
        )

    identity = _provider(handler).exchange_code("the-code", "http://cb")

    assert identity.provider_user_id == "1234"
    assert identity.email == "carol@example.com"
    assert [r.method for r in requests] == ["POST", "GET"]


@pytest.mark.parametrize(
    "token_response",
    [
        httpx.Response(400, json={"error": "invalid_grant"}),
        httpx.Response(200, json={"token_type": "Bearer"}),
        httpx.Response(200, text="not json"),
    ],
)
def test_exchange_failures_raise_provider_error(token_response: httpx.Response) -> None:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return token_response

    with pytest.raises(AuthProviderError):
        _provider(handler).exchange_code("the-code", "http://cb")

    assert calls["n"] == 1


def test_unverified_email_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/token":
            return httpx.Response(200, json={"access_token": "at-123"})
        return httpx.Response(200, json={"sub": "1", "email": "a@x.com", "email_verified": False})

    with pytest.raises(AuthProviderError):
        _provider(handler).exchange_code("the-code", "http://cb")


def test_network_error_raises_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(AuthProviderError) as excinfo:
        _provider(handler).exchange_code("the-code", "http://cb")

    assert excinfo.value.context["stage"] == "exchange"
