"""
api/routes/v1/auth.py -- Registration, login, reset and verification endpoints.

Routes:
  POST /api/v1/auth/register                -- create account; 201 + session token
  POST /api/v1/auth/login                   -- email/password login; 200 + session token
  POST /api/v1/auth/request-password-reset  -- mail a reset link (generic reply)
  POST /api/v1/auth/reset-password          -- consume a reset token
  POST /api/v1/auth/verify-email            -- consume a verification token
  GET  /api/v1/auth/profile                 -- current account (requires auth)

Handlers are plain `def`: AuthService does blocking bcrypt and SQL work, so
FastAPI runs them in its thread pool. Every failure is an AuthError raised by
the service and rendered by the handler in api/main.py.

Security:
  Login and reset requests are rate-limited per IP (LOGIN_RATE_LIMIT).
  Cache-Control: no-store on responses that carry a session token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import LOGIN_RATE_LIMIT, limiter
from api.models import (
    AccountEnvelope,
    AccountResponse,
    AuthData,
    AuthResponse,
    LoginRequest,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    RegisterRequest,
    VerifyEmailRequest,
)
from auth.dependencies import get_auth_service, get_current_account
from auth.models import Account, AuthResult
from auth.service import AuthService
from auth.tokens import TokenKind

# Auth policy:
# - POST /auth/register, /auth/login, /auth/request-password-reset,
#   /auth/reset-password, /auth/verify-email: public
# - GET  /auth/profile: requires a session token (get_current_account)
router = APIRouter()


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(body: RegisterRequest, service: AuthService = Depends(get_auth_service)) -> JSONResponse:
    result = service.register(
        body.email,
        body.username,
        body.password,
        date_of_birth=body.date_of_birth.isoformat() if body.date_of_birth else None,
        preferences=body.preferences.model_dump(mode="json") if body.preferences else None,
    )
    return _token_response(
        201,
        "User registered successfully. Please check your email for verification.",
        result,
        service,
    )


@limiter.limit(LOGIN_RATE_LIMIT)  # must be ABOVE @router so FastAPI introspects the undecorated handler
@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password.

    Unknown email and wrong password produce the same INVALID_CREDENTIALS
    error so the endpoint cannot be used to probe for registered addresses.
    """
    service = get_auth_service(request)
    result = service.login(body.email, body.password)
    return _token_response(200, "Login successful", result, service)


@limiter.limit(LOGIN_RATE_LIMIT)
@router.post("/auth/request-password-reset", response_model=MessageResponse)
def request_password_reset(request: Request, body: PasswordResetRequest) -> MessageResponse:
    """Always answers with the same message whether or not the email is registered."""
    message = get_auth_service(request).request_password_reset(body.email)
    return MessageResponse(message=message)


@router.post("/auth/reset-password", response_model=MessageResponse)
def reset_password(body: PasswordResetConfirm, service: AuthService = Depends(get_auth_service)) -> MessageResponse:
    service.reset_password(body.token, body.new_password)
    return MessageResponse(message="Password reset successfully")


@router.post("/auth/verify-email", response_model=MessageResponse)
def verify_email(body: VerifyEmailRequest, service: AuthService = Depends(get_auth_service)) -> MessageResponse:
    service.verify_email(body.token)
    return MessageResponse(message="Email verified successfully")


@router.get("/auth/profile", response_model=AccountEnvelope)
def get_profile(account: Account = Depends(get_current_account)) -> AccountEnvelope:
    return AccountEnvelope(data=AccountResponse.from_account(account))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _token_response(status_code: int, message: str, result: AuthResult, service: AuthService) -> JSONResponse:
    body = AuthResponse(
        message=message,
        data=AuthData(
            account=AccountResponse.from_account(result.account),
            token=result.token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=service.tokens.ttl(TokenKind.SESSION),
        ),
    )
    resp = JSONResponse(status_code=status_code, content=body.model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp
