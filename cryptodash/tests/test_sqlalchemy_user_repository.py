from __future__ import annotations

from collections.abc import Iterator

import pytest
from flask.testing import FlaskClient
from sqlalchemy.exc import IntegrityError

from cryptodash.app import create_app
from cryptodash.domain.users.entities import NO_PASSWORD, NewUser
from cryptodash.domain.users.exceptions import DuplicateIdentifierError, StoreUnavailableError
from cryptodash.infrastructure.container import Container
from cryptodash.infrastructure.db import Database, SchemaBootstrapError
from cryptodash.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyUserRepository,
    _violated_fields,
)
from cryptodash.shared.config import AppConfig, DatabaseConfig


@pytest.fixture()
def database(config: AppConfig) -> Iterator[Database]:
    database = Database(config.database).open()
    database.ensure_schema()
    yield database
    database.close()


@pytest.fixture()
def repository(database: Database) -> SqlAlchemyUserRepository:
    return SqlAlchemyUserRepository(database)


def test_add_and_find(repository: SqlAlchemyUserRepository) -> None:
    created = repository.add(
        NewUser(email="a@x.com", username="alice", password_hash="hash")
    )

    assert len(created.id) == 32
    assert created.created_at.tzinfo is not None
    assert repository.find_by_id(created.id) == created
    assert repository.find_by_email("a@x.com") == created
    assert repository.find_by_username("alice") == created
    assert repository.find_by_username("bob") is None
    assert repository.find_by_id("missing") is None


def test_oauth_users_store_empty_marker(repository: SqlAlchemyUserRepository) -> None:
    created = repository.add(NewUser(email="g@x.com", username="g", password_hash=NO_PASSWORD))

    assert repository.find_by_email("g@x.com").password_hash == NO_PASSWORD
    assert not created.has_password


def test_unique_violation_maps_to_duplicate(repository: SqlAlchemyUserRepository) -> None:
    repository.add(NewUser(email="a@x.com", username="alice", password_hash="hash"))

    with pytest.raises(DuplicateIdentifierError) as email_clash:
        repository.add(NewUser(email="a@x.com", username="other", password_hash="hash"))
    with pytest.raises(DuplicateIdentifierError) as username_clash:
        repository.add(NewUser(email="b@x.com", username="alice", password_hash="hash"))

    assert email_clash.value.fields == ("email",)
    assert username_clash.value.fields == ("username",)
    assert repository.find_by_email("b@x.com") is None


def test_ensure_schema_is_idempotent(database: Database) -> None:
    database.ensure_schema()
    database.ensure_schema()

    assert database.ping()


def test_missing_table_is_a_store_fault(config: AppConfig) -> None:
    database = Database(config.database).open()
    try:
        with pytest.raises(StoreUnavailableError):
            SqlAlchemyUserRepository(database).find_by_email("a@x.com")
    finally:
        database.close()


def test_schema_bootstrap_failure(tmp_path) -> None:
    config = DatabaseConfig(DATABASE_URL=f"sqlite:///{tmp_path / 'missing' / 'dir' / 'db.sqlite'}")
    database = Database(config).open()
    try:
        with pytest.raises(SchemaBootstrapError):
            database.ensure_schema()
    finally:
        database.close()


def test_database_requires_open(config: AppConfig) -> None:
    database = Database(config.database)

    assert not database.is_open
    with pytest.raises(RuntimeError):
        database.engine


def test_health_endpoint(config: AppConfig) -> None:
    container = Container(config).open()
    try:
        client: FlaskClient = create_app(config, container).test_client()
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.get_json() == {"ok": True, "database": "ok"}

        container.database.close()
        failing = client.get("/api/health")
        assert failing.status_code == 503
        assert failing.get_json()["ok"] is False
    finally:
        container.close()


def test_register_flow_against_sqlite(config: AppConfig) -> None:
    container = Container(config).open()
    container.database.ensure_schema()
    try:
        client = create_app(config, container).test_client()
        first = client.post(
            "/register", data={"email": "a@x.com", "username": "alice", "password": "longenough"}
        )
        client.post("/logout")
        second = client.post(
            "/register", data={"email": "a@x.com", "username": "bob", "password": "longenough"}
        )
        login = client.post("/login", data={"usernameOrEmail": "alice", "password": "longenough"})

        assert first.status_code == 302
        assert second.status_code == 400
        assert second.get_json() == {"errors": {"email": ["A user already exists with this email"]}}
        assert login.status_code == 302
        assert container.user_repository.find_by_username("bob") is None
    finally:
        container.close()


@pytest.mark.parametrize(
    ("message", "fields"),
    [
        ("UNIQUE constraint failed: users.email", ("email",)),
        ("UNIQUE constraint failed: users.username", ("username",)),
        (
            'duplicate key value violates unique constraint "ix_users_username"\n'
            "DETAIL:  Key (username)=(emailfan) already exists.",
            ("username",),
        ),
        (
            'duplicate key value violates unique constraint "users_email_key"\n'
            "DETAIL:  Key (email)=(usernamefan@x.com) already exists.",
            ("email",),
        ),
        ('duplicate key value violates unique constraint "ix_users_username"', ("username",)),
    ],
)
def test_violated_field_is_read_from_the_constraint(message: str, fields: tuple[str, ...]) -> None:
    exc = IntegrityError("INSERT INTO users ...", {}, Exception(message))

    assert _violated_fields(exc) == list(fields)
