"""
auth/sessions.py -- Redis-backed session store.

A session is one Redis key, session:<token>, whose value is the principal id
and whose expiry is set atomically with SET ... EX. Redis enforces the TTL, so
resolve() never checks timestamps itself: an expired session is simply a
missing key.

Security:
  Tokens are secrets.token_urlsafe(32) -- 256 bits of entropy, URL-safe, and
  opaque. Nothing about the principal can be decoded from a token, and the
  collision probability across any realistic number of sessions is negligible,
  so a token resolves to exactly one principal for its whole lifetime.

  TTL is fixed from creation. resolve() is a plain GET and never extends it.

Failure mode:
  Every Redis error (refused connection, socket timeout, protocol error) is
  raised as StoreUnavailable. Nothing is retried here -- a failed store call
  fails the request.

The redis.Redis client is injected. It owns a thread-safe connection pool, so
one instance is shared by every request handler.
"""

from __future__ import annotations

import logging
import secrets
import uuid

import redis

from auth.errors import StoreUnavailable
from core.config import SEVEN_DAYS, Settings

logger = logging.getLogger("userauth.sessions")

_TOKEN_BYTES = 32
_KEY_PREFIX = "session:"


def connect_redis(settings: Settings) -> redis.Redis:
    """Build the shared Redis client with bounded connect and command timeouts."""
    return redis.Redis.from_url(
        settings.redis_url,
        socket_connect_timeout=settings.store_timeout_seconds,
        socket_timeout=settings.store_timeout_seconds,
        decode_responses=True,
    )


def generate_token() -> str:
    return secrets.token_urlsafe(_TOKEN_BYTES)


class SessionStore:
    """Map opaque session tokens to principal ids with a fixed lifetime.

    Usage:
        store = SessionStore(connect_redis(get_settings()))
        token = store.create(principal.id)
        store.resolve(token)    # principal.id
        store.revoke(token)
        store.resolve(token)    # None
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int = SEVEN_DAYS, key_prefix: str = _KEY_PREFIX) -> None:
        self._redis = client
        self.ttl_seconds = ttl_seconds
        self._prefix = key_prefix

    def _key(self, token: str) -> str:
        return f"{self._prefix}{token}"

    def create(self, principal_id: uuid.UUID) -> str:
        """Issue a new session for principal_id and return its token.

        The token is returned only after Redis acknowledged the write, so a
        caller never hands out a cookie for a session that does not exist.
        """
        token = generate_token()
        try:
            self._redis.set(self._key(token), str(principal_id), ex=self.ttl_seconds)
        except redis.exceptions.RedisError as exc:
            logger.error("Failed to create session for principal %s: %s", principal_id, exc)
            raise StoreUnavailable() from exc
        return token

    def resolve(self, token: str) -> uuid.UUID | None:
        """Return the principal id for token, or None if absent or expired."""
        try:
            value = self._redis.get(self._key(token))
        except redis.exceptions.RedisError as exc:
            logger.error("Failed to resolve session: %s", exc)
            raise StoreUnavailable() from exc
        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        try:
            return uuid.UUID(value)
        except ValueError:
            # Foreign or corrupt value under our prefix -- treat as no session.
            logger.warning("Session key holds a non-UUID value; ignoring")
            return None

    def revoke(self, token: str) -> None:
        """Delete the session. Deleting an absent session is not an error."""
        try:
            self._redis.delete(self._key(token))
        except redis.exceptions.RedisError as exc:
            raise StoreUnavailable() from exc

    def ping(self) -> bool:
        """Return True if Redis answers. Used by the health endpoint; never raises."""
        try:
            return bool(self._redis.ping())
        except redis.exceptions.RedisError:
            return False

    def close(self) -> None:
        self._redis.close()
