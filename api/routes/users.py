"""
api/routes/users.py -- Read-only user directory, behind the session gate.

Routes:
  GET /api/users          -- all users, newest first
  GET /api/users/{id}     -- one user, 404 if unknown

Both require a valid session (Depends(require_identity)): 401 without one,
500 if the session store cannot be reached.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import UserResponse
from auth.dependencies import require_identity
from auth.models import AuthContext
from auth.store import UserStore

router = APIRouter()


@router.get("/users", response_model=list[UserResponse])
def list_users(request: Request, ctx: AuthContext = Depends(require_identity)) -> list[UserResponse]:
    user_store: UserStore = request.app.state.user_store
    return [UserResponse.from_principal(p) for p in user_store.list_principals()]


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(request: Request, user_id: uuid.UUID, ctx: AuthContext = Depends(require_identity)) -> UserResponse:
    user_store: UserStore = request.app.state.user_store
    principal = user_store.find_by_id(user_id)
    if principal is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "User not found."},
        )
    return UserResponse.from_principal(principal)
