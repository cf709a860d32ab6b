# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

import httpx

from cryptodash.domain.users.entities import OAuthIdentity, normalize_email
from cryptodash.domain.users.exceptions import AuthProviderError
from cryptodash.domain.users.repositories import OAuthProvider
from cryptodash.shared.config import OAuthConfig
from cryptodash.shared.logging import logger

SCOPES = ("openid", "email", "profile")


class GoogleOAuthProvider(OAuthProvider):
    """Authorization-code flow against Google's OAuth 2.0 endpoints.

    The code exchange is not retried: an authorization code is single use.
    """

    def __init__(
        self,
        config: OAuthConfig,
        *,
        timeout: float = 10.0,
        http: httpx.Client | None = None,
    ) -> None:
        self._config = config
        self._http = http or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def _require_client(self, stage: str) -> None:
        if not self._config.client_id or not self._config.client_secret:
            raise AuthProviderError(stage, "google client credentials are not configured")

    def initiate_auth(self, redirect_uri: str, state: str) -> str:
        self._require_client("initiate")
        params = {
            "client_id": self._config.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "state": state,
            "access_type": "online",
            "prompt": "select_account",
        }
        return f"{self._config.auth_url}?{urlencode(params)}"

    def exchange_code(self, code: str, redirect_uri: str) -> OAuthIdentity:
        self._require_client("exchange")
        tokens = self._request_json(
            "exchange",
            "POST",
            self._config.token_url,
            data={
                "code": code,
                "client_id": self._config.client_id,
                "client_secret": self._config.client_secret,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            },
            headers={"Accept": "application/json"},
        )
        access_token = tokens.get("access_token")
        if not access_token:
            raise AuthProviderError("exchange", "token response without access_token")

        profile = self._request_json(
            "userinfo",
            "GET",
            self._config.userinfo_url,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        subject = str(profile.get("sub") or profile.get("id") or "")
        email = normalize_email(str(profile.get("email") or ""))
        if not subject or not email:
            raise AuthProviderError("userinfo", "profile without subject or email")
        if profile.get("email_verified") is False:
            raise AuthProviderError("userinfo", "email not verified")

        logger.debug(f"oauth.google: resolved identity sub={subject}")
        return OAuthIdentity(provider_user_id=subject, email=email)

    def _request_json(self, stage: str, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._http.request(method, url, **kwargs)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise AuthProviderError(stage, f"status {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise AuthProviderError(stage, type(exc).__name__) from exc

        if not isinstance(payload, dict):
            raise AuthProviderError(stage, "unexpected payload")
        return payload


__all__ = ["GoogleOAuthProvider", "SCOPES"]
