# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from cryptodash.domain.users.entities import NO_PASSWORD, User, normalize_email
from cryptodash.domain.users.repositories import PasswordHasher, UserRepository
from cryptodash.shared.logging import logger


def is_email(identifier: str) -> bool:
    return "@" in identifier


class CredentialVerifier:
    """Resolve an email-or-username plus password to a user, or ``None``.

    Unknown identifiers and wrong passwords both return ``None`` after exactly
    one hash comparison. Store faults propagate as ``StoreUnavailableError``.
    """

    def __init__(self, *, users: UserRepository, password_hasher: PasswordHasher) -> None:
        self._users = users
        self._password_hasher = password_hasher

    def verify(self, identifier: str, password: str) -> User | None:
        if is_email(identifier):
            user = self._users.find_by_email(normalize_email(identifier))
        else:
            user = self._users.find_by_username(identifier)

        stored_hash = user.password_hash if user else NO_PASSWORD
        password_valid = self._password_hasher.verify(password, stored_hash)

        if user is None or not password_valid:
            logger.info("auth.verify: no match")
            return None

        logger.debug(f"auth.verify: match user_id={user.id}")
        return user
