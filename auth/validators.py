"""
auth/validators.py -- Input format rules for email, password and username.

Every validator is a pure function. Password and username validators never
stop at the first failure: the caller gets the full list of violated rules so
a form can render a complete checklist in one round trip.

Rules are independent. An input can break several at once, e.g. "" breaks both
the minimum-length rule and the username character rule (the character rule
demands at least one allowed character).

Lengths are counted in UTF-16 code units, the unit browsers use for
maxlength and String.length, so the server and the signup form agree on
what "8 characters" means (an emoji counts as 2). Character classes are
ASCII: a digit is 0-9, not any Unicode decimal.
"""

from __future__ import annotations

import re

from auth.models import ValidationResult

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_USERNAME_RE = re.compile(r"[A-Za-z0-9_-]+")
_SPECIAL_CHARS = '!@#$%^&*(),.?":{}|<>'

PASSWORD_MIN_LENGTH = 8
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30


def _utf16_length(value: str) -> int:
    return len(value.encode("utf-16-le", "surrogatepass")) // 2


def validate_email(email: str) -> bool:
    """Return True if email looks like local@domain.tld (no whitespace, single @)."""
    return _EMAIL_RE.fullmatch(email) is not None


def validate_password(password: str) -> ValidationResult:
    result = ValidationResult()
    if _utf16_length(password) < PASSWORD_MIN_LENGTH:
        result.errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not re.search(r"[A-Z]", password):
        result.errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        result.errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        result.errors.append("Password must contain at least one number")
    if not any(ch in _SPECIAL_CHARS for ch in password):
        result.errors.append("Password must contain at least one special character")
    return result


def validate_username(username: str) -> ValidationResult:
    result = ValidationResult()
    if _utf16_length(username) < USERNAME_MIN_LENGTH:
        result.errors.append(f"Username must be at least {USERNAME_MIN_LENGTH} characters long")
    if _utf16_length(username) > USERNAME_MAX_LENGTH:
        result.errors.append(f"Username must be no more than {USERNAME_MAX_LENGTH} characters long")
    if _USERNAME_RE.fullmatch(username) is None:
        result.errors.append("Username can only contain letters, numbers, underscores, and hyphens")
    return result
