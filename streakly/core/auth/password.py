"""Password hashing helpers."""

from __future__ import annotations

import secrets

from streakly.extensions import bcrypt

# bcrypt only accepts the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


def password_too_long(plain_password: str) -> bool:
    return len(plain_password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(plain_password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return bcrypt.generate_password_hash(plain_password).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Validate a plaintext password against a stored hash."""
    if password_too_long(plain_password):
        return False
    return bcrypt.check_password_hash(hashed_password, plain_password)


def make_dummy_hash() -> str:
    """Hash of a random secret, built once per app at the configured cost."""
    return hash_password(secrets.token_urlsafe(16))


def burn_verification(dummy_hash: str) -> None:
    """Spend the same bcrypt work as a real check when no comparison should succeed."""
    bcrypt.check_password_hash(dummy_hash, "not-the-password")
