# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from cryptodash.domain.users.entities import NewUser, User, normalize_email
from cryptodash.domain.users.exceptions import DuplicateIdentifierError
from cryptodash.domain.users.repositories import PasswordHasher, UserRepository
from cryptodash.shared.logging import logger


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher

    def execute(self, email: str, username: str, password: str) -> User:
        email = normalize_email(email)
        taken: list[str] = []
        if self._users.find_by_email(email):
            taken.append("email")
        if self._users.find_by_username(username):
            taken.append("username")
        if taken:
            raise DuplicateIdentifierError(taken)

        hashed = self._password_hasher.hash(password)
        # A concurrent registration can still win the race; the store's unique
        # constraints surface that as DuplicateIdentifierError from add()
        user = self._users.add(NewUser(email=email, username=username, password_hash=hashed))
        logger.info(f"auth.register: created user_id={user.id}")
        return user
