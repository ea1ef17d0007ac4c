"""Domain error taxonomy shared by all services.

Every error subclasses ``ValueError`` and stringifies to its machine-readable
``code`` so callers can keep matching on ``str(exc)``. Messages must never
carry passwords or raw tokens.
"""

from __future__ import annotations

from typing import Optional


class DomainError(ValueError):
    code = "domain_error"

    def __init__(self, code: Optional[str] = None, message: Optional[str] = None) -> None:
        if code:
            self.code = code
        self.message = message or self.code.replace("_", " ")
        super().__init__(self.code)


class NotFoundError(DomainError):
    """Entity missing or not owned by the caller."""

    code = "not_found"


class ConflictError(DomainError):
    """Uniqueness violation."""

    code = "conflict"


class DuplicateLogError(ConflictError):
    """A completion already exists for this habit on this tracking day."""

    code = "duplicate_log"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message=message or "Habit already logged for this date")


class AuthError(DomainError):
    """Bad credentials or an invalid/expired/revoked token."""

    code = "unauthorized"


class ValidationError(DomainError):
    """Impossible value that slipped past request validation."""

    code = "validation_error"


__all__ = [
    "DomainError",
    "NotFoundError",
    "ConflictError",
    "DuplicateLogError",
    "AuthError",
    "ValidationError",
]
