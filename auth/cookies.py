"""
auth/cookies.py -- Session cookie helpers.

The cookie is the only transport for the session token:
  httponly=True: JS cannot read the cookie (XSS mitigation).
  samesite="lax": not sent on cross-site POST -- CSRF mitigation for most cases.
  secure: only sent over HTTPS when SECURE_COOKIES=true (set in production).
  path="/": every API route sees it.
  max_age: equals the session TTL so cookie and Redis key expire together.
"""

from __future__ import annotations

from core.config import get_settings


def set_session_cookie(response, token: str) -> None:
    """Write the session token as an httpOnly cookie on the response."""
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )


def clear_session_cookie(response) -> None:
    """Expire the session cookie. Attributes must match the ones it was set with."""
    settings = get_settings()
    response.delete_cookie(
        settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )
