# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify, redirect, request

from cryptodash.application.use_cases.users.login_user import LoginUserUseCase
from cryptodash.application.use_cases.users.register_user import RegisterUserUseCase
from cryptodash.domain.users.exceptions import DuplicateIdentifierError, InvalidCredentialsError
from cryptodash.infrastructure.audit import AuditAction, audit_log
from cryptodash.interfaces.http.dto.auth import LoginForm, RegisterForm
from cryptodash.interfaces.http.forms import client_ip, form_payload
from cryptodash.interfaces.http.session import SessionManager
from cryptodash.shared.errors import validate_form
from cryptodash.shared.logging import logger
from cryptodash.shared.middleware.rate_limit import rate_limit


class AuthController:
    def __init__(
        self,
        *,
        login_use_case: LoginUserUseCase,
        register_use_case: RegisterUserUseCase,
        sessions: SessionManager,
    ) -> None:
        self._login_use_case = login_use_case
        self._register_use_case = register_use_case
        self._sessions = sessions

    def _form_page(self):
        if self._sessions.get_user() is not None:
            return redirect("/")
        return jsonify({"error": request.args.get("error")})

    def login_page(self):
        return self._form_page()

    def register_page(self):
        return self._form_page()

    @rate_limit()
    def login(self) -> Response:
        form = validate_form(LoginForm, form_payload())
        if not form.ok:
            raise form.to_error()
        dto = form.value

        ip_address = client_ip()
        try:
            user = self._login_use_case.execute(dto.username_or_email, dto.password)
        except InvalidCredentialsError:
            audit_log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"identifier": dto.username_or_email},
                success=False,
            )
            raise

        audit_log(
            AuditAction.LOGIN_SUCCESS,
            user_id=user.id,
            ip_address=ip_address,
            details={"remember": dto.remember},
        )
        logger.info(f"auth.login: ok user_id={user.id} remember={dto.remember}")
        return self._sessions.create_session(user.id, dto.remember, dto.redirect_to)

    @rate_limit()
    def register(self) -> Response:
        form = validate_form(RegisterForm, form_payload())
        if not form.ok:
            raise form.to_error()
        dto = form.value

        try:
            user = self._register_use_case.execute(dto.email, dto.username, dto.password)
        except DuplicateIdentifierError as exc:
            logger.info(f"auth.register: duplicate fields={list(exc.fields)}")
            raise

        audit_log(
            AuditAction.REGISTER,
            user_id=user.id,
            ip_address=client_ip(),
            details={"username": user.username},
        )
        return self._sessions.create_session(user.id, False, dto.redirect_to)

    def logout(self) -> Response:
        user = self._sessions.get_user()
        audit_log(
            AuditAction.LOGOUT,
            user_id=user.id if user else None,
            ip_address=client_ip(),
        )
        return self._sessions.logout()

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__)
        bp.add_url_rule("/login", view_func=self.login_page, methods=["GET"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/register", view_func=self.register_page, methods=["GET"])
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/logout", view_func=self.logout, methods=["GET", "POST"])
        return bp
