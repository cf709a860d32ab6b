# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterable
from http import HTTPStatus

from cryptodash.shared.errors.base import (
    FORM_FIELD,
    DomainError,
    InfrastructureError,
)

DUPLICATE_MESSAGES = {
    "email": "A user already exists with this email",
    "username": "A user already exists with this username",
}


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"

    def __init__(self) -> None:
        super().__init__(errors={FORM_FIELD: ["Invalid username/email or password"]})


class DuplicateIdentifierError(DomainError):
    code = "user_already_exists"

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = tuple(fields)
        super().__init__(
            errors={field: [DUPLICATE_MESSAGES[field]] for field in self.fields},
            context={"fields": list(self.fields)},
        )


class StoreUnavailableError(InfrastructureError):
    def __init__(self, operation: str) -> None:
        super().__init__(
            "store_unavailable",
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            context={"operation": operation},
        )


class AuthProviderError(InfrastructureError):
    def __init__(self, stage: str, detail: str | None = None) -> None:
        super().__init__(
            "auth_provider_error",
            status=HTTPStatus.BAD_GATEWAY,
            message="Authentication failed",
            context={"stage": stage, "detail": detail},
        )
