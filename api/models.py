"""
API request and response models for the user/auth REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py, which own the
internal domain representation. Route handlers map between the two.

UserResponse has no password_hash field, so a credential can never be
serialized into a response even if a route passes the whole Principal.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import Principal

# Deliberately loose: one "@" with something on both sides. Deliverability is
# not checked here.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /api/auth/signup."""

    email: str = Field(min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    name: str = Field(min_length=1, max_length=255)
    # Not stripped or normalized -- every byte is part of the secret.
    password: str = Field(min_length=1, max_length=1024)


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=1024)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a principal."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    email: str
    name: str
    created_at: str
    updated_at: str

    @classmethod
    def from_principal(cls, principal: Principal) -> "UserResponse":
        return cls(
            id=principal.id,
            email=principal.email,
            name=principal.name,
            created_at=principal.created_at or "",
            updated_at=principal.updated_at or "",
        )


class AuthResponse(BaseModel):
    """Response for signup, login and /auth/me."""

    model_config = ConfigDict(frozen=True)

    user: UserResponse


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    database: str
    session_store: str
