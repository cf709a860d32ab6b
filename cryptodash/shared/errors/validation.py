# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .base import FORM_FIELD, ValidationError

M = TypeVar("M", bound=BaseModel)


def format_pydantic_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}

    for error in exc.errors():
        loc = error.get("loc", ())
        field_path = ".".join(str(part) for part in loc if part is not None)
        message = error.get("msg", "Invalid value")
        # Custom errors carry their message verbatim; built-ins prefix "Value error, "
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        bucket = errors.setdefault(field_path or FORM_FIELD, [])
        if message not in bucket:
            bucket.append(message)

    return errors


@dataclass(slots=True)
class FormResult(Generic[M]):
    """Outcome of validating raw form fields: a parsed model or per-field messages."""

    value: M | None = None
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors

    def to_error(self) -> ValidationError:
        return ValidationError(self.errors)


def validate_form(model: type[M], data: Mapping[str, Any]) -> FormResult[M]:
    try:
        return FormResult(value=model.model_validate(dict(data)))
    except PydanticValidationError as exc:
        return FormResult(errors=format_pydantic_errors(exc))


__all__ = [
    "FormResult",
    "format_pydantic_errors",
    "validate_form",
]
