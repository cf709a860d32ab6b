# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from cryptodash.application.use_cases.users.verify_credentials import CredentialVerifier
from cryptodash.domain.users.entities import User
from cryptodash.domain.users.exceptions import InvalidCredentialsError


class LoginUserUseCase:
    def __init__(self, *, verifier: CredentialVerifier) -> None:
        self._verifier = verifier

    def execute(self, identifier: str, password: str) -> User:
        user = self._verifier.verify(identifier, password)
        if user is None:
            raise InvalidCredentialsError()
        return user
