"""
auth/service.py -- Orchestration of the account flows.

AuthService composes the validators, the bcrypt hasher, the TokenIssuer, the
AccountStore and a Notifier. Each public method is a short linear sequence
that fails fast with a structured AuthError (see auth/errors.py); nothing is
retried and no intermediate state is persisted.

Security decisions:
  Anti-enumeration: login reports INVALID_CREDENTIALS for both an unknown
      email and a wrong password, and runs bcrypt against DUMMY_HASH in the
      unknown-email case so response time does not leak existence.
      request_password_reset returns the same message whether or not the
      account exists.

  Token kinds: reset_password only accepts password-reset tokens and
      verify_email only accepts email-verification tokens. A cross-kind token
      is reported as INVALID_TOKEN, never accepted.

  Side effects that must not fail a request (email dispatch, last-active
      stamping) go through _notify() / _touch(), which log and continue.

Layer rule: no imports from api/. FastAPI never appears here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.errors import AuthenticationError, ConflictError, InternalError, NotFoundError, ValidationError
from auth.models import Account, AuthResult
from auth.notifier import Notifier
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from auth.store import AccountStore
from auth.tokens import TokenError, TokenExpired, TokenIssuer
from auth.validators import validate_email, validate_password, validate_username

logger = logging.getLogger("mindconnect.auth.service")

RESET_REQUESTED_MESSAGE = "If an account with this email exists, a password reset link has been sent."


class AuthService:
    """Register, login, reset, verify and profile flows over an AccountStore.

    Usage:
        service = AuthService(store, TokenIssuer.from_settings(settings), LogNotifier(url))
        result = service.register("a@b.com", "user1", "Passw0rd!")
        result.account.is_verified   # False
        service.login("a@b.com", "Passw0rd!").token
    """

    def __init__(self, store: AccountStore, tokens: TokenIssuer, notifier: Notifier) -> None:
        self.store = store
        self.tokens = tokens
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Registration and login
    # ------------------------------------------------------------------

    def register(
        self,
        email: str | None,
        username: str | None,
        password: str | None,
        date_of_birth: str | None = None,
        preferences: dict[str, Any] | None = None,
    ) -> AuthResult:
        if not email or not username or not password:
            raise ValidationError("MISSING_FIELDS", "Email, username, and password are required")
        if not validate_email(email):
            raise ValidationError("INVALID_EMAIL", "Please provide a valid email address")
        username_check = validate_username(username)
        if not username_check.is_valid:
            raise ValidationError("INVALID_USERNAME", "Username validation failed", username_check.errors)
        password_check = validate_password(password)
        if not password_check.is_valid:
            raise ValidationError("INVALID_PASSWORD", "Password validation failed", password_check.errors)

        if self.store.get_by_email(email) is not None:
            raise ConflictError("EMAIL_EXISTS", "An account with this email already exists")
        if self.store.get_by_username(username) is not None:
            raise ConflictError("USERNAME_EXISTS", "This username is already taken")

        new_account = Account(
            email=email,
            username=username,
            date_of_birth=date_of_birth,
            preferences=preferences,
        )
        try:
            account_id = self.store.create_account(new_account, hash_password(password))
        except IntegrityError as exc:
            # A concurrent registration won the race past the pre-checks.
            raise self._registration_conflict(email) from exc

        account = self.store.get_by_id(account_id)
        if account is None:
            raise InternalError("REGISTRATION_FAILED", "Failed to register user")

        self._notify(self.notifier.send_verification, email, self.tokens.issue_verification(email))
        token = self.tokens.issue_session(account.id, account.email, account.username)
        logger.info("Registered account id=%d", account.id)
        return AuthResult(account=account, token=token)

    def login(self, email: str | None, password: str | None) -> AuthResult:
        if not email or not password:
            raise ValidationError("MISSING_CREDENTIALS", "Email and password are required")

        account = self.store.get_by_email(email)
        password_hash = self.store.get_password_hash(email) if account is not None else None
        if account is None or password_hash is None:
            # Equalize timing -- do NOT return before running bcrypt.
            verify_password(password, DUMMY_HASH)
            raise _invalid_credentials()
        if not verify_password(password, password_hash):
            raise _invalid_credentials()

        token = self.tokens.issue_session(account.id, account.email, account.username)
        self._touch(account.id)
        return AuthResult(account=account, token=token)

    def authenticate(self, token: str | None) -> Account:
        """Resolve a bearer session token to its Account.

        Every failure is a 401 with a distinct code so clients can tell an
        expired session (re-login) from a forged or foreign token.
        """
        if not token:
            raise AuthenticationError("MISSING_TOKEN", "Access token is required")
        try:
            claims = self.tokens.verify_session(token)
        except TokenExpired as exc:
            raise AuthenticationError("TOKEN_EXPIRED", "Access token has expired") from exc
        except TokenError as exc:
            raise AuthenticationError("INVALID_TOKEN", "Invalid access token") from exc

        account = self.store.get_by_id(claims.account_id)
        if account is None:
            raise AuthenticationError("USER_NOT_FOUND", "User account no longer exists")
        self._touch(account.id)
        return account

    # ------------------------------------------------------------------
    # Password reset and email verification
    # ------------------------------------------------------------------

    def request_password_reset(self, email: str | None) -> str:
        """Send a reset link if the account exists. Always returns the same message."""
        if not email:
            raise ValidationError("MISSING_EMAIL", "Email is required")
        if not validate_email(email):
            raise ValidationError("INVALID_EMAIL", "Please provide a valid email address")

        if self.store.get_by_email(email) is not None:
            self._notify(self.notifier.send_password_reset, email, self.tokens.issue_reset(email))
        else:
            logger.info("Password reset requested for unknown email")
        return RESET_REQUESTED_MESSAGE

    def reset_password(self, token: str | None, new_password: str | None) -> None:
        if not token or not new_password:
            raise ValidationError("MISSING_FIELDS", "Token and new password are required")
        try:
            claims = self.tokens.verify_reset(token)
        except TokenError as exc:
            raise ValidationError("INVALID_TOKEN", "Invalid or expired reset token") from exc

        password_check = validate_password(new_password)
        if not password_check.is_valid:
            raise ValidationError("INVALID_PASSWORD", "Password validation failed", password_check.errors)

        if self.store.get_by_email(claims.email) is None:
            raise NotFoundError("USER_NOT_FOUND", "User account not found")
        if not self.store.update_password(claims.email, hash_password(new_password)):
            raise InternalError("UPDATE_FAILED", "Failed to update password")
        logger.info("Password reset completed")

    def verify_email(self, token: str | None) -> None:
        if not token:
            raise ValidationError("MISSING_TOKEN", "Verification token is required")
        try:
            claims = self.tokens.verify_verification(token)
        except TokenError as exc:
            raise ValidationError("INVALID_TOKEN", "Invalid or expired verification token") from exc

        if not self.store.mark_verified(claims.email):
            raise NotFoundError("USER_NOT_FOUND", "User account not found")

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def get_profile(self, account_id: int) -> Account:
        account = self.store.get_by_id(account_id)
        if account is None:
            raise NotFoundError("USER_NOT_FOUND", "User account not found")
        return account

    def update_profile(
        self,
        account_id: int,
        username: str | None = None,
        date_of_birth: str | None = None,
        preferences: dict[str, Any] | None = None,
    ) -> Account:
        """Apply the fields that are not None and return the updated account."""
        updates: dict[str, Any] = {}
        if username is not None:
            username_check = validate_username(username)
            if not username_check.is_valid:
                raise ValidationError("INVALID_USERNAME", "Username validation failed", username_check.errors)
            if not self.store.is_username_available(username, exclude_id=account_id):
                raise _username_taken()
            updates["username"] = username
        if date_of_birth is not None:
            updates["date_of_birth"] = date_of_birth
        if preferences is not None:
            updates["preferences"] = preferences

        try:
            updated = self.store.update_profile(account_id, **updates)
        except IntegrityError as exc:
            raise _username_taken() from exc
        if not updated:
            raise NotFoundError("USER_NOT_FOUND", "User account not found")
        return self.get_profile(account_id)

    def change_password(self, account_id: int, current_password: str | None, new_password: str | None) -> None:
        if not current_password or not new_password:
            raise ValidationError("MISSING_FIELDS", "Current password and new password are required")

        account = self.get_profile(account_id)
        password_hash = self.store.get_password_hash(account.email)
        if password_hash is None or not verify_password(current_password, password_hash):
            raise ValidationError("INVALID_CURRENT_PASSWORD", "Current password is incorrect")

        password_check = validate_password(new_password)
        if not password_check.is_valid:
            raise ValidationError(
                "INVALID_NEW_PASSWORD", "New password validation failed", password_check.errors
            )

        if not self.store.update_password(account.email, hash_password(new_password)):
            raise InternalError("PASSWORD_UPDATE_FAILED", "Failed to update password")
        logger.info("Password changed for account id=%d", account_id)

    def delete_profile_picture(self, account_id: int) -> Account:
        self.get_profile(account_id)
        if not self.store.update_profile_picture(account_id, None):
            raise InternalError("PROFILE_PICTURE_DELETE_FAILED", "Failed to delete profile picture")
        return self.get_profile(account_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _registration_conflict(self, email: str) -> ConflictError:
        if self.store.get_by_email(email) is not None:
            return ConflictError("EMAIL_EXISTS", "An account with this email already exists")
        return _username_taken()

    def _notify(self, send: Callable[[str, str], None], email: str, token: str) -> None:
        """Dispatch a notification; a delivery failure is logged, never raised."""
        try:
            send(email, token)
        except Exception:
            logger.exception("Notification dispatch failed (%s)", getattr(send, "__name__", "send"))

    def _touch(self, account_id: int) -> None:
        """Best-effort last-active stamp."""
        try:
            self.store.update_last_active(account_id)
        except SQLAlchemyError:
            logger.warning("Could not update last_active for account id=%d", account_id, exc_info=True)


def _invalid_credentials() -> AuthenticationError:
    return AuthenticationError("INVALID_CREDENTIALS", "Invalid email or password")


def _username_taken() -> ConflictError:
    return ConflictError("USERNAME_EXISTS", "This username is already taken")
