"""
auth/errors.py -- Structured failures raised by the auth service.

Each subclass fixes the HTTP status for its category; the instance carries a
machine-readable code (e.g. "EMAIL_EXISTS"), a human message and optional
details such as the list of violated password rules. api/main.py registers a
single exception handler that renders any AuthError into the error envelope,
so the service never imports FastAPI.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations


class AuthError(Exception):
    status_code: int = 500

    def __init__(self, code: str, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class ValidationError(AuthError):
    """Malformed or missing input. The caller can resubmit corrected input."""

    status_code = 400


class AuthenticationError(AuthError):
    """Bad credentials or a bad, expired or wrong-kind token."""

    status_code = 401


class NotFoundError(AuthError):
    status_code = 404


class ConflictError(AuthError):
    """Uniqueness violation on email or username."""

    status_code = 409


class InternalError(AuthError):
    """Repository or hashing failure. The message returned to clients stays generic."""

    status_code = 500
