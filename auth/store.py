"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper. AccountStore is the repository;
_row_to_account is the mapper. Service and route code never touches SQL.

Lifecycle: the store is constructed explicitly (api/main.py lifespan, or a
test fixture), injected into AuthService, and closed on shutdown. There is no
module-level engine.

Uniqueness:
  email and username are unique regardless of case: both carry a UNIQUE index
  on lower(column), and every lookup applies the same lower() on both sides, so
  "A@B.com" finds the account stored as "a@b.com". Stored values keep the
  casing the user registered with.

  The service pre-checks both to produce friendly errors, but
  check-then-insert is not atomic -- two concurrent registrations can both
  pass the pre-check. The index is the real guard: the second insert raises
  sqlalchemy.exc.IntegrityError, which the service turns into a 409.

Security:
  All queries use bound parameters. The password hash is never placed on an
  Account; get_password_hash() is the only read path for it.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    func,
    select,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from auth.models import Account

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_accounts = Table(
    "accounts",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False),
    Column("username", String(30), nullable=False),
    Column("password_hash", String(255), nullable=False),
    Column("date_of_birth", String(10)),  # YYYY-MM-DD
    Column("is_verified", Integer, nullable=False, server_default="0"),
    Column("preferences", Text),  # JSON blob
    Column("profile_picture", Text),  # URL or storage key
    Column("created_at", String(32), nullable=False),
    Column("last_active", String(32)),
)

Index("ux_accounts_email_ci", func.lower(_accounts.c.email), unique=True)
Index("ux_accounts_username_ci", func.lower(_accounts.c.username), unique=True)

# Columns update_profile() may touch. Anything else is a programming error.
_PROFILE_FIELDS = {"username", "date_of_birth", "preferences"}


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked by a writer.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _email_matches(email: str):
    return func.lower(_accounts.c.email) == func.lower(email)


def _username_matches(username: str):
    return func.lower(_accounts.c.username) == func.lower(username)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for Account records.

    Usage:
        store = AccountStore("sqlite:///mindconnect.db")
        account_id = store.create_account(Account(email="a@b.com", username="alice"), hash_password("..."))
        account = store.get_by_email("a@b.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_account(self, account: Account, password_hash: str) -> int:
        """Insert a new account and return its database ID.

        Raises sqlalchemy.exc.IntegrityError if the email or username is
        already taken, including when a concurrent request won the race.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _accounts.insert().values(
                    email=account.email,
                    username=account.username,
                    password_hash=password_hash,
                    date_of_birth=account.date_of_birth,
                    is_verified=1 if account.is_verified else 0,
                    preferences=_dump_preferences(account.preferences),
                    profile_picture=account.profile_picture,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def update_last_active(self, account_id: int) -> None:
        with self.engine.connect() as conn:
            conn.execute(_accounts.update().where(_accounts.c.id == account_id).values(last_active=_now_iso()))
            conn.commit()

    def update_password(self, email: str, password_hash: str) -> bool:
        """Replace the stored hash. Returns False if no account has that email."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _accounts.update().where(_email_matches(email)).values(password_hash=password_hash)
            )
            conn.commit()
        return result.rowcount > 0

    def mark_verified(self, email: str) -> bool:
        """Set is_verified. Returns False if no account has that email.

        Idempotent: verifying an already verified account still reports True.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_accounts.update().where(_email_matches(email)).values(is_verified=1))
            conn.commit()
        return result.rowcount > 0

    def update_profile(self, account_id: int, **fields) -> bool:
        """Update username, date_of_birth and/or preferences.

        preferences is passed as a dict and stored as JSON. Unknown field
        names raise ValueError. Returns True if a row was updated.
        IntegrityError propagates when the new username collides.
        """
        unknown = set(fields) - _PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown profile fields: {unknown!r}")
        if not fields:
            return self.get_by_id(account_id) is not None
        if "preferences" in fields:
            fields["preferences"] = _dump_preferences(fields["preferences"])
        with self.engine.connect() as conn:
            result = conn.execute(_accounts.update().where(_accounts.c.id == account_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def update_profile_picture(self, account_id: int, picture: str | None) -> bool:
        """Store (or clear, with None) the profile picture reference."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _accounts.update().where(_accounts.c.id == account_id).values(profile_picture=picture)
            )
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, account_id: int) -> Account | None:
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(_accounts.c.id == account_id)).fetchone()
        return _row_to_account(row) if row is not None else None

    def get_by_email(self, email: str) -> Account | None:
        """Look up an account by email, ignoring case. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(_email_matches(email))).fetchone()
        return _row_to_account(row) if row is not None else None

    def get_by_username(self, username: str) -> Account | None:
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(_username_matches(username))).fetchone()
        return _row_to_account(row) if row is not None else None

    def get_password_hash(self, email: str) -> str | None:
        """Return the bcrypt hash for the account with this email, or None."""
        with self.engine.connect() as conn:
            return conn.execute(select(_accounts.c.password_hash).where(_email_matches(email))).scalar()

    def is_username_available(self, username: str, exclude_id: int | None = None) -> bool:
        """Return True if no other account uses this username.

        exclude_id lets a user "change" their username to its current value.
        """
        query = select(_accounts.c.id).where(_username_matches(username))
        if exclude_id is not None:
            query = query.where(_accounts.c.id != exclude_id)
        with self.engine.connect() as conn:
            return conn.execute(query.limit(1)).fetchone() is None

    def ping(self) -> bool:
        """Return True if the database answers a trivial query. Used by /health."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _dump_preferences(preferences: dict | None) -> str | None:
    return json.dumps(preferences) if preferences is not None else None


def _row_to_account(row) -> Account:
    # password_hash is selected with the row but intentionally not mapped.
    return Account(
        id=row.id,
        email=row.email,
        username=row.username,
        date_of_birth=row.date_of_birth,
        is_verified=bool(row.is_verified),
        preferences=json.loads(row.preferences) if row.preferences else None,
        profile_picture=row.profile_picture,
        created_at=row.created_at,
        last_active=row.last_active,
    )
