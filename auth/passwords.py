"""
auth/passwords.py -- bcrypt password hashing.

Using bcrypt directly rather than passlib[bcrypt]: passlib's wrap-bug
detection feeds bcrypt 4.x a >72-byte password, which it rejects. Direct usage
has no compatibility shim.

The cost factor comes from Settings.bcrypt_rounds (default 12). Tests lower it
to 4 through BCRYPT_ROUNDS so the suite stays fast.

Both functions are pure and hold no shared state, so they are safe to call
from FastAPI's worker threads concurrently.
"""

from __future__ import annotations

import bcrypt

from core.config import get_settings

_settings = get_settings()

# bcrypt only reads the first 72 bytes. bcrypt>=5 raises instead of
# truncating, so truncate here and keep older hashes verifiable.
_BCRYPT_MAX_BYTES = 72


def _secret_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str, rounds: int | None = None) -> str:
    """Return a salted bcrypt hash of the given plaintext password."""
    salt = bcrypt.gensalt(rounds=rounds or _settings.bcrypt_rounds)
    return bcrypt.hashpw(_secret_bytes(plain), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed or empty hash yields False rather than an exception.
    """
    try:
        return bcrypt.checkpw(_secret_bytes(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Timing equalization: login runs bcrypt against this hash when the email is
# unknown, so a missing account costs the same as a wrong password.
DUMMY_HASH: str = hash_password("mindconnect_timing_dummy")
