"""
api/main.py -- FastAPI application entry point for MindConnect.

Run with:  python main.py --reload
           uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. log_requests          -- assigns the request id, logs method/path/status/latency
  2. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  3. CORSMiddleware        -- adds CORS headers for the frontend origin(s)
  4. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan builds the AccountStore, TokenIssuer, Notifier and AuthService on
startup and closes the store on shutdown. Nothing is created at import time,
so tests swap in their own stores by replacing the lifespan.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.profile import router as profile_router
from auth.errors import AuthError, InternalError
from auth.notifier import build_notifier
from auth.service import AuthService
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from core.config import get_settings

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("mindconnect.api")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


def build_auth_service(store: AccountStore) -> AuthService:
    """Wire an AuthService around an existing store using the current Settings."""
    settings = get_settings()
    return AuthService(store, TokenIssuer.from_settings(settings), build_notifier(settings))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the account store on startup, close it on shutdown."""
    logger.info("MindConnect API starting up")
    app.state.account_store = AccountStore(_settings.database_url)
    app.state.auth_service = build_auth_service(app.state.account_store)
    logger.info("Account store initialized")

    yield

    app.state.account_store.close()
    logger.info("MindConnect API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="MindConnect API",
    description="Account registration, login, password reset, email verification and profile management.",
    version=__version__,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# add_middleware() wraps the existing stack, so the LAST call becomes the
# outermost layer. Registered innermost-first: SlowAPI -> CORS -> TrustedHost.
# @app.middleware("http") uses add_middleware() too, so log_requests below
# ends up outside all three and sees every request, rejected ones included.
# ---------------------------------------------------------------------------

app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
    max_age=3600,
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)

# SlowAPIMiddleware looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request id + logging middleware
#
# The request id is taken from X-Request-ID when the client (or a proxy) sends
# one, otherwise generated. It is echoed in the response header and in every
# error body so a user report can be matched to a log line.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request.state.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    logger.info(
        "%s %s %d %.1fms %s rid=%s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
        request.state.request_id,
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(profile_router, prefix="/api/v1", tags=["Profile"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope:
#   {"error": {"code", "message", "details"?, "timestamp", "requestId"}}
# ---------------------------------------------------------------------------


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID") or "unknown"


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: list[str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorDetail(
            code=code,
            message=message,
            details=details,
            timestamp=datetime.now(timezone.utc).isoformat(),
            request_id=_request_id(request),
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, exclude_none=True))


@app.exception_handler(AuthError)
def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render a service failure. Status comes from the AuthError subclass."""
    if isinstance(exc, InternalError):
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return error_response(request, exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(RateLimitExceeded)
def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with Retry-After.

    Sync on purpose: SlowAPIMiddleware calls the registered handler directly
    and returns its result without awaiting it.
    """
    response = error_response(request, 429, "RATE_LIMITED", "Too many requests.", [str(exc.detail)])
    response.headers["Retry-After"] = str(int(getattr(exc, "retry_after", 60)))
    return response


@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema violations (wrong types, oversized fields) are plain 400s."""
    details = [f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()]
    return error_response(request, 400, "VALIDATION_ERROR", "Request validation failed.", details)


@app.exception_handler(StarletteHTTPException)
def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and disallowed methods still get the standard envelope."""
    codes = {404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED"}
    return error_response(request, exc.status_code, codes.get(exc.status_code, f"HTTP_{exc.status_code}"), str(exc.detail))


@app.exception_handler(Exception)
def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected failures (repository unreachable, etc.).

    The traceback goes to the log only. The client receives a generic message.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return error_response(request, 500, "INTERNAL_ERROR", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly on the app so it is reachable regardless of router state.
# No rate limit: load balancers must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness plus a database round-trip check."""
    db_ok = request.app.state.account_store.ping()
    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        version=__version__,
        components={"app": "ok", "database": "ok" if db_ok else "error"},
    )
