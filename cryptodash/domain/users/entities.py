# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# Stored in place of a hash for accounts provisioned through OAuth
NO_PASSWORD = ""


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(slots=True, frozen=True)
class User:

    id: str
    email: str
    username: str
    password_hash: str
    created_at: datetime

    @property
    def has_password(self) -> bool:
        return self.password_hash != NO_PASSWORD


@dataclass(slots=True, frozen=True)
class NewUser:
    """User record awaiting insertion; the store assigns id and timestamp."""

    email: str
    username: str
    password_hash: str


@dataclass(slots=True, frozen=True)
class OAuthIdentity:

    provider_user_id: str
    email: str
