"""
auth/tokens.py -- Signing and verification of the three token kinds.

Security design decisions:
  JWT: python-jose with HS256. One SECRET_KEY signs session, password-reset
       and email-verification tokens. Because the key is shared, every token
       carries a "kind" claim, and each verify_* method rejects a token whose
       kind differs from the one it expects even when the signature is good.
       Without that check a reset link could be replayed as a login session.

  Claims: decoded payloads become one of three frozen dataclasses
       (SessionClaims / ResetClaims / VerificationClaims). _CLAIM_PARSERS maps
       every TokenKind to its parser; tests/test_tokens.py fails when a kind
       is added without one.

  Failures: TokenExpired (good signature, exp in the past), TokenInvalid (bad
       signature, malformed token, unknown kind, missing claims) and
       WrongTokenKind (valid token presented in the wrong place). The service
       layer turns these into 400/401 responses.

Tokens are stateless and never persisted. TokenIssuer holds only the key and
the lifetimes, so a single instance is shared by all request threads.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from auth.models import ResetClaims, SessionClaims, TokenClaims, VerificationClaims
from core.config import Settings

logger = logging.getLogger("mindconnect.auth.tokens")

_ALGORITHM = "HS256"


class TokenKind(str, Enum):
    SESSION = "session"
    PASSWORD_RESET = "password-reset"
    EMAIL_VERIFICATION = "email-verification"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TokenError(Exception):
    """Base class for every token verification failure."""


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


class WrongTokenKind(TokenError):
    def __init__(self, expected: TokenKind, actual: TokenKind) -> None:
        super().__init__(f"Expected a {expected.value} token, got {actual.value}")
        self.expected = expected
        self.actual = actual


# ---------------------------------------------------------------------------
# Payload -> claims parsers
# ---------------------------------------------------------------------------


def _parse_session(payload: dict[str, Any]) -> SessionClaims:
    return SessionClaims(
        account_id=int(payload["account_id"]),
        email=str(payload["email"]),
        username=str(payload["username"]),
    )


def _parse_reset(payload: dict[str, Any]) -> ResetClaims:
    return ResetClaims(email=str(payload["email"]))


def _parse_verification(payload: dict[str, Any]) -> VerificationClaims:
    return VerificationClaims(email=str(payload["email"]))


_CLAIM_PARSERS: dict[TokenKind, Callable[[dict[str, Any]], TokenClaims]] = {
    TokenKind.SESSION: _parse_session,
    TokenKind.PASSWORD_RESET: _parse_reset,
    TokenKind.EMAIL_VERIFICATION: _parse_verification,
}


# ---------------------------------------------------------------------------
# Issuer / verifier
# ---------------------------------------------------------------------------


class TokenIssuer:
    """Issues and verifies signed, time-bounded tokens.

    Usage:
        tokens = TokenIssuer.from_settings(get_settings())
        token = tokens.issue_reset("a@b.com")
        tokens.verify_reset(token)          # ResetClaims(email="a@b.com")
        tokens.verify_session(token)        # raises WrongTokenKind
    """

    def __init__(
        self,
        secret_key: str,
        session_ttl: int = 24 * 3600,
        reset_ttl: int = 3600,
        verification_ttl: int = 24 * 3600,
    ) -> None:
        self._secret_key = secret_key
        self._ttl = {
            TokenKind.SESSION: session_ttl,
            TokenKind.PASSWORD_RESET: reset_ttl,
            TokenKind.EMAIL_VERIFICATION: verification_ttl,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenIssuer:
        return cls(
            secret_key=settings.secret_key,
            session_ttl=settings.token_expire_seconds,
            reset_ttl=settings.reset_token_expire_seconds,
            verification_ttl=settings.verification_token_expire_seconds,
        )

    def ttl(self, kind: TokenKind) -> int:
        """Lifetime in seconds of tokens of the given kind."""
        return self._ttl[kind]

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    def issue_session(self, account_id: int, email: str, username: str) -> str:
        return self._encode(
            TokenKind.SESSION,
            {"account_id": account_id, "email": email, "username": username},
        )

    def issue_reset(self, email: str) -> str:
        return self._encode(TokenKind.PASSWORD_RESET, {"email": email})

    def issue_verification(self, email: str) -> str:
        return self._encode(TokenKind.EMAIL_VERIFICATION, {"email": email})

    # ------------------------------------------------------------------
    # Verify
    # ------------------------------------------------------------------

    def verify_session(self, token: str) -> SessionClaims:
        return self._decode(token, TokenKind.SESSION)

    def verify_reset(self, token: str) -> ResetClaims:
        return self._decode(token, TokenKind.PASSWORD_RESET)

    def verify_verification(self, token: str) -> VerificationClaims:
        return self._decode(token, TokenKind.EMAIL_VERIFICATION)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _encode(self, kind: TokenKind, claims: dict[str, Any]) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "kind": kind.value,
            "iat": now,
            "exp": now + timedelta(seconds=self._ttl[kind]),
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def _decode(self, token: str, expected: TokenKind) -> Any:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[_ALGORITHM])
        except ExpiredSignatureError as exc:
            raise TokenExpired("Token has expired") from exc
        except JWTError as exc:
            raise TokenInvalid("Token signature or format is invalid") from exc

        try:
            kind = TokenKind(payload.get("kind"))
        except ValueError as exc:
            raise TokenInvalid("Token kind is missing or unknown") from exc
        if kind is not expected:
            logger.info("Rejected %s token presented as %s", kind.value, expected.value)
            raise WrongTokenKind(expected, kind)

        try:
            return _CLAIM_PARSERS[kind](payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise TokenInvalid("Token is missing required claims") from exc
