"""
auth/errors.py -- Exception taxonomy for authentication outcomes.

Every class carries the HTTP status and error code the API layer renders, so
routes raise these directly and a single exception handler in api/main.py
turns them into the standard error envelope.

internal=True marks failures that are bugs or infrastructure problems. Their
message is generic and their details go to the log, never to the client.
"""

from __future__ import annotations


class AuthError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."
    internal: bool = True


# ---------------------------------------------------------------------------
# Client-facing outcomes
# ---------------------------------------------------------------------------


class InvalidCredentials(AuthError):
    """Unknown email or wrong password. The two are deliberately indistinguishable."""

    status_code = 401
    code = "bad_credentials"
    message = "Invalid email or password."
    internal = False


class Unauthenticated(AuthError):
    """Missing, expired or unknown session token."""

    status_code = 401
    code = "unauthorized"
    message = "Authentication required."
    internal = False


class EmailTaken(AuthError):
    status_code = 409
    code = "email_taken"
    message = "An account with that email already exists."
    internal = False


# ---------------------------------------------------------------------------
# Internal failures (500)
# ---------------------------------------------------------------------------


class HashingFailed(AuthError):
    """The password hasher could not derive a hash."""


class MalformedHash(AuthError):
    """A stored credential is not a parseable argon2 hash string."""


class StoreUnavailable(AuthError):
    """The session store refused the connection or timed out."""


class PersistenceError(AuthError):
    """Unexpected failure from the user database."""
