"""
core/database.py -- SQLAlchemy Core engine, schema, and transaction scope.

Uses SQLAlchemy Core (not ORM) so the dataclasses in auth/models.py and
forum/models.py remain the authoritative domain representation. Swapping
SQLite for PostgreSQL is a connection string change, not a rewrite.

Transaction model:
  Repositories never open their own connections. Every service operation opens
  exactly one `Database.transaction()` and hands the resulting Connection to
  each repository call it makes. The whole operation (token lookup, ownership
  check, mutation) therefore commits or rolls back as a unit, and the database
  is the only synchronization point between concurrent requests.

Uniqueness:
  UNIQUE constraints on users.username, users.email and user_sessions.token
  are the real enforcement. Service-level look-ups are an early exit that
  produces a friendlier error; an IntegrityError on insert is the backstop.

Identifiers:
  Integer primary keys stay internal (foreign keys, ordering tie-breaks).
  Every entity also carries an opaque `uuid`, the only identifier the API
  layer ever exposes.

Layer rule: core/ is the kernel. No imports from api/, auth/, or forum/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger("forum.db")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("uuid", String(36), nullable=False, unique=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("salt", String(64), nullable=False),
    Column("password_digest", Text, nullable=False),
    Column("role", String(30), nullable=False, server_default="nonadmin"),
    Column("first_name", String(100)),
    Column("last_name", String(100)),
    Column("country", String(100)),
    Column("about_me", Text),
    Column("dob", String(32)),
    Column("contact_number", String(32)),
    Column("created_at", String(32), nullable=False),
)

user_sessions = Table(
    "user_sessions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("uuid", String(36), nullable=False, unique=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("token", String(128), nullable=False, unique=True),
    Column("issued_at", String(32), nullable=False),
    Column("expires_at", String(32), nullable=False),
    Column("logged_out_at", String(32)),  # NULL until signout; never cleared
)

questions = Table(
    "questions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("uuid", String(36), nullable=False, unique=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("content", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)

answers = Table(
    "answers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("uuid", String(36), nullable=False, unique=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("question_id", Integer, ForeignKey("questions.id"), nullable=False),
    Column("content", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def from_iso(value: str | None) -> datetime | None:
    """Parse a stored ISO 8601 timestamp. Naive values are treated as UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _configure_sqlite(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


class Database:
    """Owns the engine and hands out transaction-scoped connections.

    Usage:
        db = Database("sqlite:///forum.db")
        with db.transaction() as conn:
            user = user_store.get_by_username(conn, "alice")
        db.close()
    """

    def __init__(self, db_url: str, echo: bool = False) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # FastAPI runs sync route handlers in a thread pool, so the same
            # pooled connection may be used from more than one thread.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args, echo=echo)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _configure_sqlite)
        metadata.create_all(self.engine)
        logger.info("Database ready (%s)", self.engine.url.render_as_string(hide_password=True))

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Yield a connection inside BEGIN ... COMMIT.

        Any exception propagating out of the block rolls the transaction back,
        so a failed operation never leaves partial writes behind.
        """
        with self.engine.begin() as conn:
            yield conn

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            logger.exception("Database ping failed")
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()
