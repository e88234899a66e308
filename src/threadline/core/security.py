"""Password hashing and one-time token helpers."""
from __future__ import annotations

import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_password_hasher = PasswordHasher()

RESET_TOKEN_BYTES = 32


def hash_password(password: str) -> str:
    """Return an Argon2id hash of ``password`` (salt and parameters included)."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if ``password`` matches ``password_hash``.

    Malformed hashes are treated as a mismatch rather than an error.
    """
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    """Return True if the stored hash was produced with outdated parameters."""
    try:
        return _password_hasher.check_needs_rehash(password_hash)
    except InvalidHashError:
        return True


def generate_reset_token() -> str:
    """Return a random hex token for password reset links."""
    return secrets.token_hex(RESET_TOKEN_BYTES)
