"""
api/routes/auth.py -- Signup, login, logout and identity endpoints.

Routes:
  POST /api/auth/signup   -- create account; 201 + session cookie
  POST /api/auth/login    -- password login; 200 + session cookie
  POST /api/auth/logout   -- revoke session if any; always 200, cookie cleared
  GET  /api/auth/me       -- principal for the current session, else 401

Handlers are plain `def` so FastAPI runs them in its thread pool: argon2 is
deliberately CPU-expensive and the stores are blocking clients.

Errors are raised as auth.errors exceptions and rendered by the AuthError
handler in api/main.py. Client-facing outcomes (401/409) keep their code;
internal failures become a generic 500.

Security:
  Unknown email and wrong password both produce 401 bad_credentials.
  Cache-Control: no-store on signup and login responses.
  The cookie is set only after the session store acknowledged the session.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import AuthResponse, LoginRequest, MessageResponse, SignupRequest, UserResponse
from auth.cookies import clear_session_cookie, set_session_cookie
from auth.dependencies import get_session_token
from auth.errors import Unauthenticated
from auth.service import AuthService

router = APIRouter()


def _auth_response(status_code: int, principal, token: str) -> JSONResponse:
    resp = JSONResponse(
        status_code=status_code,
        content=AuthResponse(user=UserResponse.from_principal(principal)).model_dump(mode="json"),
    )
    set_session_cookie(resp, token)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/signup", response_model=AuthResponse, status_code=201)
def signup(request: Request, body: SignupRequest) -> JSONResponse:
    """Create a principal and log it in.

    409 email_taken if the address is registered (no session is created).
    500 if hashing fails or the session store is down -- in the latter case
    the account exists and the client should log in again.
    """
    service: AuthService = request.app.state.auth_service
    principal, token = service.signup(body.email, body.name, body.password)
    return _auth_response(201, principal, token)


@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; set the session cookie."""
    service: AuthService = request.app.state.auth_service
    principal, token = service.login(body.email, body.password)
    return _auth_response(200, principal, token)


@router.post("/auth/logout", response_model=MessageResponse)
def logout(request: Request) -> JSONResponse:
    """Revoke the current session and clear the cookie, whether or not it was valid."""
    token = get_session_token(request)
    if token is not None:
        service: AuthService = request.app.state.auth_service
        service.logout(token)
    resp = JSONResponse(content=MessageResponse(message="Logged out.").model_dump())
    clear_session_cookie(resp)
    return resp


@router.get("/auth/me", response_model=AuthResponse)
def me(request: Request) -> AuthResponse:
    """Return the principal behind the session cookie.

    401 when there is no cookie, the session is unknown or expired, or the
    principal was deleted -- the three are not distinguished.
    """
    token = get_session_token(request)
    if token is None:
        raise Unauthenticated()
    service: AuthService = request.app.state.auth_service
    principal = service.identify(token)
    if principal is None:
        raise Unauthenticated()
    return AuthResponse(user=UserResponse.from_principal(principal))
