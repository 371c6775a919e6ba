"""
auth/passwords.py -- argon2id password hashing and verification.

Security design decisions:
  Algorithm: argon2id via argon2-cffi. It is memory-hard, so GPU/ASIC
       brute-force of a leaked users table is expensive. Work factors come
       from Settings and are embedded in every hash string, so raising them
       later does not invalidate existing credentials.

  Salt: argon2-cffi draws a fresh random salt from os.urandom on every
       hash() call. Two hashes of the same password never match textually.

  Verify: the library re-derives the digest with the embedded parameters and
       compares in constant time. A mismatch is False; a string that is not an
       argon2 hash at all raises MalformedHash, because that means the stored
       credential is corrupt, not that the user typed the wrong password.

  Timing equalization: verify_dummy() runs a full verification against a hash
       computed once per hasher, so a login for an unknown email costs the same
       as a login with a wrong password and response time does not reveal which
       emails have accounts.

Hashing is CPU-bound (tens of milliseconds per call). Call it from sync route
handlers, which FastAPI runs in its thread pool, never from the event loop.
"""

from __future__ import annotations

import logging

import argon2
from argon2.exceptions import HashingError, InvalidHashError, VerificationError, VerifyMismatchError

from auth.errors import HashingFailed, MalformedHash
from core.config import Settings

logger = logging.getLogger("userauth.auth")

_DUMMY_PASSWORD = "userauth_timing_dummy"  # noqa: S105 -- not a credential


class PasswordHasher:
    """Derive and verify salted argon2id hashes.

    Usage:
        hasher = PasswordHasher.from_settings(get_settings())
        stored = hasher.hash("secret123")
        hasher.verify("secret123", stored)   # True
    """

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4) -> None:
        self._ph = argon2.PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=argon2.Type.ID,
        )
        # Computed once so the first unknown-email login is not measurably
        # slower than later ones.
        self._dummy_hash = self.hash(_DUMMY_PASSWORD)

    @classmethod
    def from_settings(cls, settings: Settings) -> PasswordHasher:
        return cls(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        )

    def hash(self, password: str) -> str:
        """Return a self-describing argon2id hash string for password.

        Raises HashingFailed if the underlying library cannot derive a hash
        (e.g. memory allocation failure for the configured memory cost).
        """
        try:
            return self._ph.hash(password)
        except HashingError as exc:
            logger.error("Password hashing failed: %s", exc)
            raise HashingFailed() from exc

    def verify(self, password: str, hash_string: str) -> bool:
        """Return True iff password matches hash_string.

        Raises MalformedHash if hash_string cannot be parsed as an argon2 hash
        or parses but carries parameters argon2 rejects (short salt, memory
        cost below the minimum). Only a digest mismatch is False.
        """
        try:
            return self._ph.verify(hash_string, password)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as exc:
            raise MalformedHash() from exc

    def verify_dummy(self, password: str) -> None:
        """Spend the same work as a real verification and discard the result."""
        self.verify(password, self._dummy_hash)
