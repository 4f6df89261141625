"""
tests/conftest.py -- Shared test fixtures for MindConnect.

This module provides:
  - RecordingNotifier: captures verification / reset tokens instead of mailing
  - store / tokens / notifier / service: unit-level fixtures on :memory: SQLite
  - _patch_lifespan(): wires a test store into app.state, bypassing real startup
  - api_client: TestClient + RecordingNotifier for API integration tests

Design: the API fixture uses a named shared-memory SQLite URI (not plain
:memory:) because TestClient runs sync route handlers in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread. The named URI is shared by all connections in the process.

Environment must be set before any core/auth import:
  DEBUG=true             -- get_settings() auto-generates SECRET_KEY
  BCRYPT_ROUNDS=4        -- minimum cost keeps the suite fast
  LOGIN_RATE_LIMIT       -- high enough that repeated logins are not throttled
  ALLOWED_HOSTS          -- TestClient sends Host: testserver
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any auth/core import (settings are read at import time).
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.service import AuthService
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from core.config import get_settings

TEST_SECRET = "test-secret-key-that-is-at-least-32-characters"


class RecordingNotifier:
    """Notifier double that keeps (email, token) pairs for later assertions."""

    def __init__(self) -> None:
        self.verifications: list[tuple[str, str]] = []
        self.resets: list[tuple[str, str]] = []

    def send_verification(self, email: str, token: str) -> None:
        self.verifications.append((email, token))

    def send_password_reset(self, email: str, token: str) -> None:
        self.resets.append((email, token))

    def last_verification(self, email: str) -> str:
        return [t for e, t in self.verifications if e == email][-1]

    def last_reset(self, email: str) -> str:
        return [t for e, t in self.resets if e == email][-1]


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[AccountStore, None, None]:
    s = AccountStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def tokens() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(store: AccountStore, tokens: TokenIssuer, notifier: RecordingNotifier) -> AuthService:
    return AuthService(store, tokens, notifier)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(store: AccountStore, notifier: RecordingNotifier):
    """Return an async context manager that replaces the real lifespan.

    The AuthService uses the app's real Settings-derived TokenIssuer, so
    tokens issued in tests are verifiable by the routes.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.account_store = store
        app.state.auth_service = AuthService(store, TokenIssuer.from_settings(get_settings()), notifier)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, RecordingNotifier], None, None]:
    """Yield (client, notifier) backed by an isolated shared-memory store.

    One database per test module (named after the module) so modules do not
    see each other's accounts. Tests inside a module must use distinct emails.
    """
    db_name = request.module.__name__.replace(".", "_")
    store = AccountStore(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")
    notifier = RecordingNotifier()

    app.router.lifespan_context = _patch_lifespan(store, notifier)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, notifier

    store.close()
