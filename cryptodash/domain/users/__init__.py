from .entities import NO_PASSWORD, NewUser, OAuthIdentity, User, normalize_email
from .exceptions import (
    AuthProviderError,
    DuplicateIdentifierError,
    InvalidCredentialsError,
    StoreUnavailableError,
)
from .repositories import OAuthProvider, PasswordHasher, UserRepository

__all__ = [
    "NO_PASSWORD",
    "AuthProviderError",
    "DuplicateIdentifierError",
    "InvalidCredentialsError",
    "NewUser",
    "OAuthIdentity",
    "OAuthProvider",
    "PasswordHasher",
    "StoreUnavailableError",
    "User",
    "UserRepository",
    "normalize_email",
]
