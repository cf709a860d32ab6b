# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cryptodash.domain.users.entities import NewUser
from cryptodash.domain.users.entities import User as DomainUser
from cryptodash.domain.users.exceptions import DuplicateIdentifierError, StoreUnavailableError
from cryptodash.domain.users.repositories import UserRepository
from cryptodash.infrastructure.db.models import User
from cryptodash.infrastructure.db.session import Database
from cryptodash.shared.logging import logger

T = TypeVar("T")


def _to_domain(row: User) -> DomainUser:
    created_at = row.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return DomainUser(
        id=row.id,
        email=row.email,
        username=row.username,
        password_hash=row.password_hash,
        created_at=created_at,
    )


_UNIQUE_FIELDS = ("email", "username")
_VIOLATION_PATTERNS = (
    # postgres detail: Key (username)=(emailfan) already exists.
    re.compile(r"key \((\w+)\)="),
    # postgres constraint: "ix_users_email" or "users_email_key"
    re.compile(r'constraint "(?:ix_|uq_)?users_(\w+?)(?:_key)?"'),
    # sqlite: UNIQUE constraint failed: users.email
    re.compile(r"users\.(\w+)"),
)


def _violated_fields(exc: IntegrityError) -> list[str]:
    message = str(exc.orig).lower()
    for pattern in _VIOLATION_PATTERNS:
        fields = [name for name in pattern.findall(message) if name in _UNIQUE_FIELDS]
        if fields:
            return list(dict.fromkeys(fields))
    return ["email"]


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, database: Database) -> None:
        self._database = database

    def _run(self, operation: str, work: Callable[[Session], T]) -> T:
        try:
            with self._database.session_scope() as session:
                return work(session)
        except SQLAlchemyError as exc:
            logger.opt(exception=exc).error(f"users.{operation}: store fault")
            raise StoreUnavailableError(operation) from exc

    def _find_one(self, operation: str, *criteria) -> DomainUser | None:
        def work(session: Session) -> DomainUser | None:
            row = session.scalars(select(User).where(*criteria)).first()
            return _to_domain(row) if row else None

        return self._run(operation, work)

    def find_by_id(self, user_id: str) -> DomainUser | None:
        return self._find_one("find_by_id", User.id == user_id)

    def find_by_email(self, email: str) -> DomainUser | None:
        return self._find_one("find_by_email", User.email == email)

    def find_by_username(self, username: str) -> DomainUser | None:
        return self._find_one("find_by_username", User.username == username)

    def add(self, user: NewUser) -> DomainUser:
        def work(session: Session) -> DomainUser:
            row = User(
                email=user.email,
                username=user.username,
                password_hash=user.password_hash,
                created_at=datetime.now(UTC),
            )
            session.add(row)
            session.flush()
            return _to_domain(row)

        try:
            with self._database.session_scope() as session:
                return work(session)
        except IntegrityError as exc:
            fields = _violated_fields(exc)
            logger.info(f"users.add: unique constraint violated fields={fields}")
            raise DuplicateIdentifierError(fields) from exc
        except SQLAlchemyError as exc:
            logger.opt(exception=exc).error("users.add: store fault")
            raise StoreUnavailableError("add") from exc
