# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Signed-cookie session issuance and per-request identity resolution."""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any
from urllib.parse import urlsplit

from flask import g, redirect, session
from werkzeug.wrappers import Response

from cryptodash.domain.users.entities import User
from cryptodash.domain.users.exceptions import StoreUnavailableError
from cryptodash.domain.users.repositories import UserRepository
from cryptodash.shared.errors import AuthenticationRequiredError
from cryptodash.shared.logging import logger

SESSION_USER_KEY = "user_id"
OAUTH_STATE_KEY = "oauth_state"
OAUTH_REDIRECT_KEY = "oauth_redirect_to"

_UNRESOLVED = object()


def safe_redirect(target: str | None, default: str = "/") -> str:
    """Only same-site absolute paths are followed; anything else goes to ``default``."""
    if not target:
        return default
    target = target.strip()
    if not target.startswith("/") or target.startswith("//") or "\\" in target:
        return default
    parts = urlsplit(target)
    if parts.scheme or parts.netloc:
        return default
    return target


class SessionManager:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def create_session(self, user_id: str, remember: bool, redirect_to: str | None) -> Response:
        session.clear()
        session[SESSION_USER_KEY] = user_id
        # Permanent sessions get an Expires of PERMANENT_SESSION_LIFETIME
        session.permanent = bool(remember)
        g.user_id = user_id
        g.pop("current_user", None)
        logger.info(f"session: issued user_id={user_id} remember={bool(remember)}")
        return redirect(safe_redirect(redirect_to))

    def get_user(self) -> User | None:
        cached = g.get("current_user", _UNRESOLVED)
        if cached is not _UNRESOLVED:
            return cached

        user = self._resolve()
        g.current_user = user
        g.user_id = user.id if user else None
        return user

    def _resolve(self) -> User | None:
        user_id = session.get(SESSION_USER_KEY)
        if not isinstance(user_id, str) or not user_id:
            return None
        try:
            user = self._users.find_by_id(user_id)
        except StoreUnavailableError:
            logger.warning(f"session: store fault resolving user_id={user_id}")
            return None
        if user is None:
            logger.info(f"session: user_id={user_id} no longer exists")
        return user

    def logout(self) -> Response:
        user_id = session.get(SESSION_USER_KEY)
        session.clear()
        g.pop("current_user", None)
        g.user_id = None
        logger.info(f"session: cleared user_id={user_id}")
        return redirect("/")

    def begin_oauth(self, state: str, redirect_to: str | None) -> None:
        session[OAUTH_STATE_KEY] = state
        session[OAUTH_REDIRECT_KEY] = safe_redirect(redirect_to)

    def pop_oauth(self) -> tuple[str | None, str]:
        state = session.pop(OAUTH_STATE_KEY, None)
        redirect_to = session.pop(OAUTH_REDIRECT_KEY, None)
        return state, safe_redirect(redirect_to)

    def login_required(self, view: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if self.get_user() is None:
                raise AuthenticationRequiredError()
            return view(*args, **kwargs)

        return wrapper


__all__ = [
    "OAUTH_REDIRECT_KEY",
    "OAUTH_STATE_KEY",
    "SESSION_USER_KEY",
    "SessionManager",
    "safe_redirect",
]
