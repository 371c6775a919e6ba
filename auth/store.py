"""
auth/store.py -- SQLAlchemy Core persistence layer for principals.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_principal is the mapper.
Route, service and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  The UNIQUE constraint on email is the only uniqueness check -- there is no
  read-then-insert, so two concurrent signups for one email cannot both win.
  The loser gets IntegrityError, surfaced as EmailTaken.

Pooling:
  The engine's pool is shared by every request thread. pool_timeout bounds
  how long a request waits for a free connection; on SQLite (the default
  backend) SQLAlchemy picks its own pool class and the size knobs are skipped.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, Uuid, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.errors import EmailTaken, PersistenceError
from auth.models import Principal

logger = logging.getLogger("userauth.store")

_DEFAULT_DB_URL = "sqlite:///./userauth.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Uuid, primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during signups."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for Principal records.

    Usage:
        store = UserStore("sqlite:///./userauth.db")
        principal = store.create_principal("a@x.com", "Alice", hasher.hash("secret123"))
        store.find_by_email("a@x.com")
        store.close()
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL, pool_size: int = 5, pool_timeout: float = 3.0) -> None:
        connect_args: dict = {}
        engine_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        else:
            engine_args["pool_size"] = pool_size
            engine_args["pool_timeout"] = pool_timeout
            engine_args["pool_pre_ping"] = True
        self.engine: Engine = create_engine(db_url, connect_args=connect_args, **engine_args)
        if db_url.startswith("sqlite") and ":memory:" not in db_url and "mode=memory" not in db_url:
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_principal(self, email: str, name: str, password_hash: str) -> Principal:
        """Insert a new principal with its credential and return it.

        Raises EmailTaken if the email is already registered and
        PersistenceError for any other database failure.
        """
        now = _now_iso()
        principal = Principal(
            id=uuid.uuid4(),
            email=email,
            name=name,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    _users.insert().values(
                        id=principal.id,
                        email=principal.email,
                        name=principal.name,
                        password_hash=principal.password_hash,
                        created_at=principal.created_at,
                        updated_at=principal.updated_at,
                    )
                )
        except IntegrityError as exc:
            raise EmailTaken() from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to create principal for %s: %s", email, exc)
            raise PersistenceError() from exc
        return principal

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_by_email(self, email: str) -> Principal | None:
        """Look up a principal by exact email (case-sensitive). Returns None if not found."""
        return self._fetch_one(_users.c.email == email, email)

    def find_by_id(self, principal_id: uuid.UUID) -> Principal | None:
        """Look up a principal by primary key. Returns None if not found."""
        return self._fetch_one(_users.c.id == principal_id, principal_id)

    def list_principals(self) -> list[Principal]:
        """Return all principals, newest first."""
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(_users.select().order_by(_users.c.created_at.desc())).fetchall()
        except SQLAlchemyError as exc:
            logger.error("Failed to list principals: %s", exc)
            raise PersistenceError() from exc
        return [_row_to_principal(r) for r in rows]

    def _fetch_one(self, clause, ident) -> Principal | None:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(clause)).fetchone()
        except SQLAlchemyError as exc:
            logger.error("Failed to look up principal %s: %s", ident, exc)
            raise PersistenceError() from exc
        return _row_to_principal(row) if row is not None else None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def ping(self) -> bool:
        """Return True if the database answers SELECT 1. Never raises."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("Database health check failed: %s", exc)
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_principal(row) -> Principal:
    return Principal(
        id=row.id,
        email=row.email,
        name=row.name,
        password_hash=row.password_hash,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
