# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from cryptodash.domain.users.entities import User, normalize_email

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_MAX_LENGTH = 64
PASSWORD_MIN_LENGTH = 8

_FORM_CONFIG = ConfigDict(extra="ignore")


def _with_blanks(data: Any, keys: tuple[str, ...]) -> Any:
    # Absent required fields are validated as empty strings so they get our messages
    if isinstance(data, dict):
        return {**dict.fromkeys(keys, ""), **data}
    return data


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _redirect_target(value: Any) -> str:
    value = _text(value).strip()
    return value or "/"


def _checkbox(value: Any) -> Any:
    if value is None or value == "":
        return False
    return value


class LoginForm(BaseModel):
    username_or_email: str = Field("", alias="usernameOrEmail")
    password: str = Field("")
    redirect_to: str = Field("/", alias="redirectTo")
    remember: bool = False

    model_config = _FORM_CONFIG

    @model_validator(mode="before")
    @classmethod
    def _fill(cls, data: Any) -> Any:
        return _with_blanks(data, ("usernameOrEmail", "password"))

    @field_validator("username_or_email", mode="before")
    @classmethod
    def _identifier(cls, value: Any) -> str:
        value = _text(value).strip()
        if not value:
            raise PydanticCustomError("missing", "Username or email is required")
        return value

    @field_validator("password", mode="before")
    @classmethod
    def _password(cls, value: Any) -> str:
        value = _text(value)
        if not value:
            raise PydanticCustomError("missing", "Password is required")
        return value

    @field_validator("redirect_to", mode="before")
    @classmethod
    def _redirect(cls, value: Any) -> str:
        return _redirect_target(value)

    @field_validator("remember", mode="before")
    @classmethod
    def _remember(cls, value: Any) -> Any:
        return _checkbox(value)


class RegisterForm(BaseModel):
    email: str = Field("")
    username: str = Field("")
    password: str = Field("")
    redirect_to: str = Field("/", alias="redirectTo")

    model_config = _FORM_CONFIG

    @model_validator(mode="before")
    @classmethod
    def _fill(cls, data: Any) -> Any:
        return _with_blanks(data, ("email", "username", "password"))

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value: Any) -> str:
        value = _text(value).strip()
        if not EMAIL_PATTERN.match(value):
            raise PydanticCustomError("email", "Invalid email address")
        return normalize_email(value)

    @field_validator("username", mode="before")
    @classmethod
    def _username(cls, value: Any) -> str:
        value = _text(value).strip()
        if not value:
            raise PydanticCustomError("missing", "Username is required")
        if "@" in value:
            # "@" marks an identifier as an email at sign-in
            raise PydanticCustomError("username_at", "Username cannot contain @")
        if len(value) > USERNAME_MAX_LENGTH:
            raise PydanticCustomError(
                "too_long",
                "Username must be at most {max_length} characters",
                {"max_length": USERNAME_MAX_LENGTH},
            )
        return value

    @field_validator("password", mode="before")
    @classmethod
    def _password(cls, value: Any) -> str:
        value = _text(value)
        if len(value) < PASSWORD_MIN_LENGTH:
            raise PydanticCustomError(
                "too_short",
                "Password must be at least {min_length} characters",
                {"min_length": PASSWORD_MIN_LENGTH},
            )
        return value

    @field_validator("redirect_to", mode="before")
    @classmethod
    def _redirect(cls, value: Any) -> str:
        return _redirect_target(value)


class UserDTO(BaseModel):
    id: str
    email: str
    username: str
    created_at: datetime

    @classmethod
    def from_entity(cls, user: User) -> UserDTO:
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            created_at=user.created_at,
        )
