"""
auth/dependencies.py -- FastAPI Depends() helpers that gate requests on a session.

The session token arrives in one cookie (Settings.session_cookie_name). Both
helpers converge on an AuthContext holding the resolved principal id.

require_identity() is the gate. Per request:
  no cookie          -> Unauthenticated (401), the session store is not contacted
  store unreachable  -> StoreUnavailable (500) -- fail closed, never open
  unknown / expired  -> Unauthenticated (401)
  resolved           -> AuthContext, also recorded on request.state.auth

try_identify() is the soft variant for observability (request logging).
It performs the same lookup but never raises -- any failure is "no identity" --
and it never records request.state.auth. The lookup outcome is cached per
request, so the middleware and the gate share one Redis read.

Both are plain functions, so FastAPI runs them in its thread pool and the
blocking Redis call never stalls the event loop.

Layer rule: no imports from api/. This module may import from fastapi
because it is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import Request

from auth.errors import AuthError, Unauthenticated
from auth.models import AuthContext
from auth.sessions import SessionStore
from core.config import get_settings

logger = logging.getLogger("userauth.auth")


def get_session_token(request: Request) -> str | None:
    """Return the raw session token from the request cookie, or None."""
    return request.cookies.get(get_settings().session_cookie_name) or None


def _resolve(request: Request, token: str) -> uuid.UUID | None:
    """Resolve token at most once per request.

    The logging middleware and the gate both need the lookup. The outcome
    (principal id, None, or the store error) is kept on request.state under a
    private key so the second caller reuses it instead of hitting Redis again.
    This never sets request.state.auth.
    """
    cached = getattr(request.state, "_session_lookup", None)
    if cached is not None and cached[0] == token:
        outcome = cached[1]
        if isinstance(outcome, AuthError):
            raise outcome
        return outcome

    sessions: SessionStore = request.app.state.session_store
    try:
        principal_id = sessions.resolve(token)
    except AuthError as exc:
        request.state._session_lookup = (token, exc)
        raise
    request.state._session_lookup = (token, principal_id)
    return principal_id


def require_identity(request: Request) -> AuthContext:
    """Require a valid session. Raises Unauthenticated or StoreUnavailable.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(ctx: AuthContext = Depends(require_identity)): ...
    """
    token = get_session_token(request)
    if token is None:
        raise Unauthenticated()

    principal_id = _resolve(request, token)
    if principal_id is None:
        raise Unauthenticated()

    ctx = AuthContext(principal_id=principal_id, token=token)
    request.state.auth = ctx
    return ctx


def try_identify(request: Request) -> AuthContext | None:
    """Best-effort session lookup. Returns None on any failure, never raises."""
    token = get_session_token(request)
    if token is None:
        return None
    try:
        principal_id = _resolve(request, token)
    except AuthError as exc:
        logger.debug("Best-effort identity lookup failed: %s", type(exc).__name__)
        return None
    if principal_id is None:
        return None
    return AuthContext(principal_id=principal_id, token=token)
