# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Completion of the OAuth redirect-back (callback) step."""

from __future__ import annotations

import hmac
import secrets
from dataclasses import dataclass, field, replace
from enum import Enum

from cryptodash.domain.users.entities import (
    NO_PASSWORD,
    NewUser,
    OAuthIdentity,
    User,
    normalize_email,
)
from cryptodash.domain.users.exceptions import AuthProviderError, DuplicateIdentifierError
from cryptodash.domain.users.repositories import OAuthProvider, UserRepository
from cryptodash.shared.logging import logger

AUTH_FAILED_MESSAGE = "Authentication failed"
_USERNAME_ATTEMPTS = 3
# Room for the "-xxxxxx" collision suffix within the 64-character column
USERNAME_BASE_LENGTH = 57


class OAuthCallbackState(str, Enum):
    AWAITING_CODE = "awaiting_code"
    EXCHANGING_CODE = "exchanging_code"
    RESOLVING_USER = "resolving_user"
    CREATING_SESSION = "creating_session"
    FAILED = "failed"


@dataclass(slots=True)
class OAuthCallbackResult:
    state: OAuthCallbackState
    user: User | None = None
    error: str | None = None
    created: bool = False
    path: list[OAuthCallbackState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is OAuthCallbackState.CREATING_SESSION and self.user is not None


def derive_username(email: str) -> str:
    # Usernames never carry "@"; sign-in treats such identifiers as emails
    local = email.rsplit("@", 1)[0].replace("@", "").strip()
    return local[:USERNAME_BASE_LENGTH] or "user"


class CompleteOAuthLoginUseCase:
    def __init__(self, *, users: UserRepository, provider: OAuthProvider) -> None:
        self._users = users
        self._provider = provider

    def execute(
        self,
        *,
        code: str | None,
        error: str | None,
        redirect_uri: str,
        state: str | None,
        expected_state: str | None,
    ) -> OAuthCallbackResult:
        result = OAuthCallbackResult(state=OAuthCallbackState.AWAITING_CODE)
        result.path.append(result.state)

        if error:
            logger.warning(f"oauth.callback: provider returned error={error!r}")
            return self._fail(result)
        if not code:
            logger.info("oauth.callback: no code supplied")
            return result
        if not expected_state or not state or not hmac.compare_digest(state, expected_state):
            logger.warning("oauth.callback: state mismatch")
            return self._fail(result)

        try:
            self._advance(result, OAuthCallbackState.EXCHANGING_CODE)
            identity = self._provider.exchange_code(code, redirect_uri)
            if not identity.email:
                raise AuthProviderError("exchange", "identity without email")
            identity = replace(identity, email=normalize_email(identity.email))

            self._advance(result, OAuthCallbackState.RESOLVING_USER)
            user = self._users.find_by_email(identity.email)
            if user is None:
                user, result.created = self._provision(identity)
            if user is None:
                raise AuthProviderError("provision", "could not create local user")

            result.user = user
            self._advance(result, OAuthCallbackState.CREATING_SESSION)
            return result
        except AuthProviderError as exc:
            logger.opt(exception=exc).error(
                f"oauth.callback: provider failure in {result.state.value} "
                f"context={dict(exc.context or {})}"
            )
            return self._fail(result)
        except Exception:
            logger.exception(f"oauth.callback: unexpected failure in {result.state.value}")
            return self._fail(result)

    def _provision(self, identity: OAuthIdentity) -> tuple[User | None, bool]:
        base = derive_username(identity.email)
        username = base
        for _ in range(_USERNAME_ATTEMPTS):
            if self._users.find_by_username(username) is not None:
                username = f"{base}-{secrets.token_hex(3)}"
                continue
            try:
                user = self._users.add(
                    NewUser(email=identity.email, username=username, password_hash=NO_PASSWORD)
                )
            except DuplicateIdentifierError as exc:
                if "email" in exc.fields:
                    # Lost a race against another callback for the same account
                    return self._users.find_by_email(identity.email), False
                username = f"{base}-{secrets.token_hex(3)}"
                continue
            logger.info(
                f"oauth.callback: provisioned user_id={user.id} "
                f"provider_user_id={identity.provider_user_id}"
            )
            return user, True
        return None, False

    @staticmethod
    def _advance(result: OAuthCallbackResult, state: OAuthCallbackState) -> None:
        logger.debug(f"oauth.callback: {result.state.value} -> {state.value}")
        result.state = state
        result.path.append(state)

    @classmethod
    def _fail(cls, result: OAuthCallbackResult) -> OAuthCallbackResult:
        cls._advance(result, OAuthCallbackState.FAILED)
        result.user = None
        result.error = AUTH_FAILED_MESSAGE
        return result
