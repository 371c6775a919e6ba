"""
auth/service.py -- Signup, login, logout and identity lookup.

AuthService composes the three capabilities it is constructed with:
  PasswordHasher -- hash/verify credentials
  SessionStore   -- issue/resolve/revoke session tokens (Redis)
  UserStore      -- persist/read principals (SQL)

Nothing here reaches for a global. api/main.py builds one AuthService at
startup and tests build their own around in-memory stores.

Ordering within a call:
  A session is created only after the credential check succeeded, and a token
  is returned only after the session store acknowledged the write.

Known limitation (orphan account):
  There is no transaction spanning the user database and Redis. If signup
  commits the user row and the session write then fails, the account exists
  without a session. The caller sees StoreUnavailable and the client can log
  in normally afterwards. The row is deliberately not deleted.

Logging never includes a password, only the operation and the email or
principal id involved.
"""

from __future__ import annotations

import logging

from auth.errors import AuthError, InvalidCredentials, MalformedHash, StoreUnavailable
from auth.models import Principal
from auth.passwords import PasswordHasher
from auth.sessions import SessionStore
from auth.store import UserStore

logger = logging.getLogger("userauth.auth")


class AuthService:
    def __init__(self, hasher: PasswordHasher, sessions: SessionStore, users: UserStore) -> None:
        self.hasher = hasher
        self.sessions = sessions
        self.users = users

    def signup(self, email: str, name: str, password: str) -> tuple[Principal, str]:
        """Create a principal with a hashed credential and open a session for it.

        Raises EmailTaken (no session is created), HashingFailed,
        PersistenceError, or StoreUnavailable.
        """
        password_hash = self.hasher.hash(password)
        principal = self.users.create_principal(email, name, password_hash)
        logger.info("Created principal %s", principal.id)

        try:
            token = self.sessions.create(principal.id)
        except StoreUnavailable:
            logger.error("Principal %s created without a session (session store unavailable)", principal.id)
            raise
        return principal, token

    def login(self, email: str, password: str) -> tuple[Principal, str]:
        """Verify email/password and open a new session.

        Unknown email and wrong password both raise InvalidCredentials, after
        the same amount of hashing work. A corrupt stored credential raises
        MalformedHash (an internal error), never InvalidCredentials.
        """
        principal = self.users.find_by_email(email)
        if principal is None:
            self.hasher.verify_dummy(password)
            logger.warning("Login attempt for unknown email %s", email)
            raise InvalidCredentials()

        try:
            is_valid = self.hasher.verify(password, principal.password_hash)
        except MalformedHash:
            logger.error("Stored credential for principal %s is not a valid hash", principal.id)
            raise

        if not is_valid:
            logger.warning("Invalid password attempt for %s", email)
            raise InvalidCredentials()

        token = self.sessions.create(principal.id)
        logger.info("Principal %s logged in", principal.id)
        return principal, token

    def logout(self, token: str) -> None:
        """Revoke the session for token. Always succeeds from the caller's view."""
        try:
            self.sessions.revoke(token)
        except StoreUnavailable:
            logger.warning("Could not revoke session during logout; it will expire by TTL")

    def identify(self, token: str) -> Principal | None:
        """Return the principal behind token, or None.

        "No such session" and "session valid but principal deleted" are both
        None. StoreUnavailable and PersistenceError propagate.
        """
        principal_id = self.sessions.resolve(token)
        if principal_id is None:
            return None
        try:
            return self.users.find_by_id(principal_id)
        except AuthError:
            logger.error("Failed to load principal %s for a valid session", principal_id)
            raise
