"""
tests/conftest.py -- Shared test fixtures.

This module provides:
  - FakeClock / InMemoryRedis: a Redis double that honours SET ... EX against
    a clock the test can advance, so expiry is tested without sleeping
  - hasher: argon2 with minimal work factors (same code path, far less CPU)
  - user_store: isolated named shared-memory SQLite per test
  - session_store / auth_service: built on the doubles above
  - make_client / api_client: TestClient with a patched lifespan wiring the
    test stores into app.state, bypassing real Redis and database startup

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.sessions import SessionStore
from auth.store import UserStore

_REAL_LIFESPAN = app.router.lifespan_context


# ---------------------------------------------------------------------------
# Redis double
# ---------------------------------------------------------------------------


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000_000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryRedis:
    """The subset of redis.Redis that SessionStore uses, with key expiry."""

    def __init__(self, clock: Callable[[], float]) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float | None]] = {}

    def set(self, name: str, value, ex: int | None = None) -> bool:
        expires_at = self._clock() + ex if ex is not None else None
        self._data[name] = (str(value), expires_at)
        return True

    def get(self, name: str) -> str | None:
        entry = self._data.get(name)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[name]
            return None
        return value

    def delete(self, *names: str) -> int:
        removed = 0
        for name in names:
            if self._data.pop(name, None) is not None:
                removed += 1
        return removed

    def ttl(self, name: str) -> int:
        if self.get(name) is None:
            return -2
        expires_at = self._data[name][1]
        return -1 if expires_at is None else int(expires_at - self._clock())

    def keys(self) -> list[str]:
        return [k for k in list(self._data) if self.get(k) is not None]

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def redis_client(clock: FakeClock) -> InMemoryRedis:
    return InMemoryRedis(clock)


@pytest.fixture
def session_store(redis_client: InMemoryRedis) -> SessionStore:
    return SessionStore(redis_client)


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    url = f"sqlite:///file:test_users_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    store = UserStore(db_url=url)
    yield store
    store.close()


@pytest.fixture
def auth_service(hasher: PasswordHasher, session_store: SessionStore, user_store: UserStore) -> AuthService:
    return AuthService(hasher, session_store, user_store)


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(user_store: UserStore, session_store: SessionStore, hasher: PasswordHasher):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.session_store = session_store
        app.state.auth_service = AuthService(hasher, session_store, user_store)
        yield

    return test_lifespan


@pytest.fixture
def make_client(user_store: UserStore, hasher: PasswordHasher):
    """Return a factory building a started TestClient around a given Redis client.

    Tests that need a broken or spied-on session store pass their own double.
    """
    opened: list[TestClient] = []

    def _make(redis_client) -> TestClient:
        sessions = SessionStore(redis_client)
        app.router.lifespan_context = _patch_lifespan(user_store, sessions, hasher)
        client = TestClient(app, raise_server_exceptions=True)
        client.__enter__()
        opened.append(client)
        return client

    yield _make

    for client in opened:
        client.__exit__(None, None, None)
    app.router.lifespan_context = _REAL_LIFESPAN


@pytest.fixture
def api_client(make_client, redis_client: InMemoryRedis) -> TestClient:
    """TestClient backed by the in-memory Redis double and a fresh user database."""
    return make_client(redis_client)
