"""Password hashing strategies."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from cryptodash.domain.users.entities import NO_PASSWORD
from cryptodash.domain.users.repositories import PasswordHasher


class WerkzeugPasswordHasher(PasswordHasher):
    """Salted hashes via werkzeug; verification compares digests in constant time.

    ``verify`` against the empty OAuth marker (or any malformed hash) still
    runs a full comparison against a throwaway hash, so callers cannot tell
    "no usable password" apart from "wrong password" by timing.
    """

    def __init__(self, method: str = "scrypt") -> None:
        self._method = method
        self._dummy_hash = generate_password_hash("cryptodash-dummy-password", method=method)

    def hash(self, password: str) -> str:
        return str(generate_password_hash(password, method=self._method))

    def verify(self, password: str, hashed: str) -> bool:
        if hashed == NO_PASSWORD or hashed.count("$") < 2:
            check_password_hash(self._dummy_hash, password)
            return False
        return bool(check_password_hash(hashed, password))
