"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Only the Authorization: Bearer <token> header is accepted. The frontend keeps
the session token client-side and sends it on each request.

get_current_account() raises AuthError subclasses (not HTTPException); the
AuthError handler in api/main.py renders them with the same envelope as every
other service failure, keeping MISSING_TOKEN / TOKEN_EXPIRED / INVALID_TOKEN /
USER_NOT_FOUND distinguishable for clients.

Layer rule: may import from fastapi (part of the DI system), never from api/.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import Account
from auth.service import AuthService


def get_auth_service(request: Request) -> AuthService:
    """Return the AuthService built in the application lifespan."""
    return request.app.state.auth_service


def bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_account(request: Request) -> Account:
    """Require a valid session token. Raises AuthenticationError (401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(account: Account = Depends(get_current_account)): ...
    """
    return get_auth_service(request).authenticate(bearer_token(request))
