"""
auth/models.py -- Domain dataclasses for account and credential entities.

Pattern: Data class (pure data container, zero logic). Stores, the token
issuer and the service do the work; these classes only own shape.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass
class Account:
    """A registered identity.

    The password hash is deliberately absent. It lives only in the accounts
    table and is read through AccountStore.get_password_hash(), so an Account
    can be serialized to a client without scrubbing.

    preferences is the decoded JSON blob (notifications / privacy /
    accessibility settings). None until the user saves preferences.
    """

    email: str
    username: str
    id: int | None = None
    date_of_birth: str | None = None  # ISO 8601 date
    is_verified: bool = False
    preferences: dict[str, Any] | None = None
    profile_picture: str | None = None
    created_at: str | None = None
    last_active: str | None = None


@dataclass
class ValidationResult:
    """Outcome of a validator: pass/fail plus every violated rule, in order."""

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


# ---------------------------------------------------------------------------
# Token claims -- one frozen dataclass per token kind
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SessionClaims:
    account_id: int
    email: str
    username: str


@dataclass(frozen=True)
class ResetClaims:
    email: str


@dataclass(frozen=True)
class VerificationClaims:
    email: str


TokenClaims = Union[SessionClaims, ResetClaims, VerificationClaims]


@dataclass
class AuthResult:
    """Returned by register and login: the public account plus a session token."""

    account: Account
    token: str
