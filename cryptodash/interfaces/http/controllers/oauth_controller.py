# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from urllib.parse import urlencode

from flask import Blueprint, Response, redirect, request, url_for

from cryptodash.application.use_cases.users.oauth_login import (
    AUTH_FAILED_MESSAGE,
    CompleteOAuthLoginUseCase,
    OAuthCallbackState,
)
from cryptodash.domain.users.exceptions import AuthProviderError
from cryptodash.domain.users.repositories import OAuthProvider
from cryptodash.infrastructure.audit import AuditAction, audit_log
from cryptodash.interfaces.http.forms import client_ip, form_payload
from cryptodash.interfaces.http.session import SessionManager
from cryptodash.shared.logging import logger

INITIATE_FAILED_MESSAGE = "Failed to initiate Google login"


def _login_redirect(error: str | None = None) -> Response:
    if error is None:
        return redirect("/login")
    return redirect(f"/login?{urlencode({'error': error})}")


class OAuthController:
    def __init__(
        self,
        *,
        provider: OAuthProvider,
        complete_use_case: CompleteOAuthLoginUseCase,
        sessions: SessionManager,
        callback_url: str = "",
    ) -> None:
        self._provider = provider
        self._complete_use_case = complete_use_case
        self._sessions = sessions
        self._callback_url = callback_url

    def _redirect_uri(self) -> str:
        return self._callback_url or url_for("oauth.callback", _external=True)

    def initiate(self) -> Response:
        state = secrets.token_urlsafe(24)
        redirect_to = form_payload().get("redirectTo") or request.args.get("redirectTo")
        try:
            url = self._provider.initiate_auth(self._redirect_uri(), state)
        except AuthProviderError as exc:
            logger.opt(exception=exc).error(
                f"oauth.initiate: provider failure context={dict(exc.context or {})}"
            )
            return _login_redirect(INITIATE_FAILED_MESSAGE)

        self._sessions.begin_oauth(state, redirect_to)
        logger.info("oauth.initiate: redirecting to provider")
        return redirect(url)

    def callback(self) -> Response:
        expected_state, redirect_to = self._sessions.pop_oauth()
        result = self._complete_use_case.execute(
            code=request.args.get("code"),
            error=request.args.get("error"),
            redirect_uri=self._redirect_uri(),
            state=request.args.get("state"),
            expected_state=expected_state,
        )

        if result.state is OAuthCallbackState.AWAITING_CODE:
            return _login_redirect()

        if not result.succeeded:
            audit_log(
                AuditAction.OAUTH_FAILED,
                ip_address=client_ip(),
                details={"path": [step.value for step in result.path]},
                success=False,
            )
            return _login_redirect(result.error or AUTH_FAILED_MESSAGE)

        user = result.user
        audit_log(
            AuditAction.OAUTH_LOGIN,
            user_id=user.id,
            ip_address=client_ip(),
            details={"created": result.created},
        )
        return self._sessions.create_session(user.id, True, redirect_to)

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("oauth", __name__)
        bp.add_url_rule("/auth/google", view_func=self.callback, methods=["GET"])
        bp.add_url_rule("/auth/google", view_func=self.initiate, methods=["POST"])
        return bp
