"""
api/main.py -- FastAPI application entry point.

Run with:      uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- credentials allowed for the configured origins so the
                       browser frontend can send the session cookie
  2. log_requests   -- latency line per request, plus the principal id when
                       the request carries a valid session (best effort)

Lifespan builds the shared capabilities once -- user database, Redis client,
password hasher -- wires them into an AuthService on app.state, and closes
them on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.users import router as users_router
from auth.dependencies import try_identify
from auth.errors import AuthError
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.sessions import SessionStore, connect_redis
from auth.store import UserStore
from core.config import get_settings

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("userauth.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Startup order:
      1. User database -- schema is created if missing.
      2. Redis -- pinged once; an unreachable session store aborts startup
         rather than serving a login page that can never issue a session.
      3. Hasher + AuthService -- the hasher precomputes its timing dummy here.
    """
    settings = get_settings()
    logger.info("Connecting to database...")
    app.state.user_store = UserStore(
        settings.database_url,
        pool_size=settings.db_pool_size,
        pool_timeout=settings.db_pool_timeout_seconds,
    )
    logger.info("Database connection pool created")

    logger.info("Connecting to Redis...")
    app.state.session_store = SessionStore(connect_redis(settings), ttl_seconds=settings.session_ttl_seconds)
    if not app.state.session_store.ping():
        app.state.user_store.close()
        raise RuntimeError(f"Session store unreachable at {settings.redis_url}")
    logger.info("Redis connection established")

    hasher = PasswordHasher.from_settings(settings)
    app.state.auth_service = AuthService(hasher, app.state.session_store, app.state.user_store)

    yield

    app.state.session_store.close()
    app.state.user_store.close()
    logger.info("Shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="User Auth API",
    description="User management API with password login and cookie-bound sessions.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=True,
)


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Every request passes through this coroutine before reaching any route
# handler. The session lookup is best effort (try_identify never raises) and
# runs in the thread pool because the Redis client is blocking. Its outcome is
# kept on the request, so a gated route does not read Redis a second time.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    ctx = await run_in_threadpool(try_identify, request)
    if ctx is not None:
        logger.info("authenticated request principal=%s", ctx.principal_id)
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(users_router, prefix="/api", tags=["Users"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render an authentication outcome.

    Internal failures were already logged with context where they were raised;
    the client only ever sees the generic message for those.
    """
    if exc.internal:
        logger.error("%s on %s %s", type(exc).__name__, request.method, request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message)).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or params fail validation.

    Only field locations and messages are echoed back -- never the submitted
    values, which may include a password.
    """
    problems = "; ".join(".".join(str(p) for p in e.get("loc", ())) + ": " + e.get("msg", "") for e in exc.errors())
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=problems,
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for FastAPI/Starlette HTTP exceptions."""
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. No authentication.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Report liveness and whether both backing stores answer."""
    db_ok = request.app.state.user_store.ping()
    redis_ok = request.app.state.session_store.ping()
    return HealthResponse(
        database="connected" if db_ok else "disconnected",
        session_store="connected" if redis_ok else "disconnected",
    )
