# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from cryptodash.shared.config import DatabaseConfig
from cryptodash.shared.logging import logger


class Base(DeclarativeBase):
    pass


class SchemaBootstrapError(RuntimeError):
    pass


class Database:
    """Explicitly owned handle on the user-record store.

    ``open()`` builds the engine, ``close()`` disposes its pool. The process
    entry point owns the lifecycle; nothing connects at import time.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database accessed before open()")
        return self._engine

    def open(self) -> Database:
        if self._engine is not None:
            return self

        url = self._config.url
        kwargs: dict[str, object] = {"echo": False, "pool_pre_ping": True}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {
                "check_same_thread": False,
                "timeout": self._config.pool_timeout,
            }
        else:
            kwargs.update(
                pool_size=self._config.pool_size,
                max_overflow=self._config.max_overflow,
                pool_timeout=self._config.pool_timeout,
                connect_args={"connect_timeout": int(self._config.pool_timeout)},
            )

        self._engine = create_engine(url, **kwargs)
        self._session_factory = sessionmaker(
            bind=self._engine, autoflush=False, expire_on_commit=False
        )
        logger.info(f"db: opened engine dialect={self._engine.dialect.name}")
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("db: engine disposed")

    def ensure_schema(self) -> None:
        # Import registers the mapped tables on Base.metadata
        from cryptodash.infrastructure.db import models  # noqa: F401

        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            raise SchemaBootstrapError(f"could not ensure database schema: {exc}") from exc
        logger.info("Database schema ensured")

    def ping(self) -> bool:
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        if self._session_factory is None:
            raise RuntimeError("Database accessed before open()")
        session = self._session_factory()
        logger.debug("db.session: opened session")
        try:
            yield session
            session.commit()
            logger.debug("db.session: committed session")
        except Exception:
            session.rollback()
            logger.debug("db.session: rolled back session")
            raise
        finally:
            session.close()
