from __future__ import annotations

import pytest

from cryptodash.application.services.password_hashing import WerkzeugPasswordHasher
from cryptodash.application.use_cases.users.login_user import LoginUserUseCase
from cryptodash.application.use_cases.users.register_user import RegisterUserUseCase
from cryptodash.application.use_cases.users.verify_credentials import CredentialVerifier
from cryptodash.domain.users.entities import NO_PASSWORD, NewUser
from cryptodash.domain.users.exceptions import (
    DuplicateIdentifierError,
    InvalidCredentialsError,
    StoreUnavailableError,
)
from cryptodash.tests.fakes import CountingHasher, InMemoryUserRepository


@pytest.fixture()
def registered(users: InMemoryUserRepository, hasher: CountingHasher):
    return RegisterUserUseCase(users=users, password_hasher=hasher).execute(
        "alice@example.com", "alice", "longenough"
    )


def test_verify_by_email_and_username_returns_same_user(
    users: InMemoryUserRepository, hasher: CountingHasher, registered
) -> None:
    verifier = CredentialVerifier(users=users, password_hasher=hasher)

    by_email = verifier.verify("alice@example.com", "longenough")
    by_username = verifier.verify("alice", "longenough")

    assert by_email is not None
    assert by_email == by_username
    assert by_email.id == registered.id


def test_wrong_password_and_unknown_user_cost_one_comparison_each(
    users: InMemoryUserRepository, hasher: CountingHasher, registered
) -> None:
    verifier = CredentialVerifier(users=users, password_hasher=hasher)

    hasher.comparisons = 0
    assert verifier.verify("alice", "wrong-password") is None
    assert hasher.comparisons == 1

    hasher.comparisons = 0
    assert verifier.verify("nobody@example.com", "longenough") is None
    assert hasher.comparisons == 1

    hasher.comparisons = 0
    assert verifier.verify("nobody", "longenough") is None
    assert hasher.comparisons == 1


def test_oauth_only_user_cannot_log_in_with_password(
    users: InMemoryUserRepository, hasher: CountingHasher
) -> None:
    users.add(NewUser(email="g@example.com", username="g", password_hash=NO_PASSWORD))
    verifier = CredentialVerifier(users=users, password_hasher=hasher)

    assert verifier.verify("g@example.com", "") is None
    assert hasher.comparisons == 1


def test_login_raises_single_generic_error(
    users: InMemoryUserRepository, hasher: CountingHasher, registered
) -> None:
    use_case = LoginUserUseCase(verifier=CredentialVerifier(users=users, password_hasher=hasher))

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        use_case.execute("alice", "nope-nope")
    with pytest.raises(InvalidCredentialsError) as unknown_user:
        use_case.execute("mallory", "nope-nope")

    assert wrong_password.value.to_dict() == unknown_user.value.to_dict()
    assert wrong_password.value.to_dict() == {
        "errors": {"form": ["Invalid username/email or password"]}
    }


def test_store_fault_is_not_reported_as_bad_credentials(
    users: InMemoryUserRepository, hasher: CountingHasher
) -> None:
    users.fail = True
    use_case = LoginUserUseCase(verifier=CredentialVerifier(users=users, password_hasher=hasher))

    with pytest.raises(StoreUnavailableError):
        use_case.execute("alice", "longenough")


def test_register_hashes_password(users: InMemoryUserRepository, hasher: CountingHasher) -> None:
    user = RegisterUserUseCase(users=users, password_hasher=hasher).execute(
        "bob@example.com", "bob", "longenough"
    )

    assert user.password_hash == "hashed:longenough"
    assert user.has_password


def test_register_reports_every_duplicate_field(
    users: InMemoryUserRepository, hasher: CountingHasher, registered
) -> None:
    use_case = RegisterUserUseCase(users=users, password_hasher=hasher)

    with pytest.raises(DuplicateIdentifierError) as both:
        use_case.execute("alice@example.com", "alice", "longenough")
    with pytest.raises(DuplicateIdentifierError) as email_only:
        use_case.execute("alice@example.com", "other", "longenough")

    assert both.value.field_errors() == {
        "email": ["A user already exists with this email"],
        "username": ["A user already exists with this username"],
    }
    assert email_only.value.field_errors() == {
        "email": ["A user already exists with this email"]
    }
    assert len(users.users) == 1


def test_werkzeug_hasher_round_trip_and_marker() -> None:
    hasher = WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")
    hashed = hasher.hash("longenough")

    assert hashed != "longenough"
    assert hasher.verify("longenough", hashed)
    assert not hasher.verify("wrong", hashed)
    assert not hasher.verify("", NO_PASSWORD)
    assert not hasher.verify("x", "not-a-werkzeug-hash")


def test_verify_email_ignores_case(
    users: InMemoryUserRepository, hasher: CountingHasher, registered
) -> None:
    verifier = CredentialVerifier(users=users, password_hasher=hasher)

    user = verifier.verify("  ALICE@Example.com ", "longenough")

    assert user is not None
    assert user.id == registered.id


def test_register_normalizes_email(users: InMemoryUserRepository, hasher: CountingHasher) -> None:
    user = RegisterUserUseCase(users=users, password_hasher=hasher).execute(
        "Bob@Example.COM", "bob", "longenough"
    )

    assert user.email == "bob@example.com"
