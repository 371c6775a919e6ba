"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and the service
do the work; api/models.py owns the HTTP shape.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field


@dataclass
class Principal:
    """A user identity as stored in the users table.

    password_hash is the argon2 PHC string (algorithm, parameters, salt and
    digest in one value). It is excluded from repr so it never ends up in a
    log line, and api/models.py has no field for it.
    """

    id: uuid.UUID
    email: str
    name: str
    password_hash: str = field(default="", repr=False)
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class AuthContext:
    """Identity resolved from a session cookie for the current request.

    Handlers receive this through Depends(require_identity) rather than
    reading request-local state.
    """

    principal_id: uuid.UUID
    token: str = field(repr=False)
