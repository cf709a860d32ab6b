# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, cast

GENERIC_FAILURE_MESSAGE = "Something went wrong"
FORM_FIELD = "form"

FieldErrors = Mapping[str, Sequence[str]]


@dataclass(slots=True, eq=False)
class AppError(Exception):
    code: str
    status: HTTPStatus
    errors: FieldErrors | None = None
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.code)

    def field_errors(self) -> dict[str, list[str]]:
        if not self.errors:
            return {FORM_FIELD: [GENERIC_FAILURE_MESSAGE]}
        return {field: list(messages) for field, messages in self.errors.items()}

    def to_dict(self) -> dict[str, Any]:
        return {"errors": self.field_errors()}


class DomainError(AppError):
    def __init__(
        self,
        *,
        code: str | None = None,
        status: HTTPStatus | None = None,
        errors: FieldErrors | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_code = code or cast(str, getattr(self, "code", "domain_error"))
        resolved_status = status or cast(
            HTTPStatus, getattr(self, "status", HTTPStatus.BAD_REQUEST)
        )
        super().__init__(
            code=resolved_code, status=resolved_status, errors=errors, context=context
        )


class InfrastructureError(AppError):
    """Store or upstream fault. Detail stays in ``context``; users see a generic message."""

    def __init__(
        self,
        code: str = "infrastructure_error",
        *,
        status: HTTPStatus | None = None,
        message: str = GENERIC_FAILURE_MESSAGE,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_status = status or HTTPStatus.INTERNAL_SERVER_ERROR
        super().__init__(
            code=code,
            status=resolved_status,
            errors={FORM_FIELD: [message]},
            context=context,
        )


class ValidationError(AppError):
    def __init__(
        self,
        errors: FieldErrors,
        *,
        code: str = "validation_error",
    ) -> None:
        super().__init__(code=code, status=HTTPStatus.BAD_REQUEST, errors=errors)


class AuthenticationRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(
            code="authentication_required",
            status=HTTPStatus.UNAUTHORIZED,
            errors={FORM_FIELD: ["Authentication required"]},
        )


class RateLimitedError(AppError):
    def __init__(self) -> None:
        super().__init__(
            code="rate_limited",
            status=HTTPStatus.TOO_MANY_REQUESTS,
            errors={FORM_FIELD: ["Too many requests"]},
        )
