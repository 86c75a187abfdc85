# -*- coding: utf-8 -*-
"""Auth — API endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ..errors import AuthError, ConflictError
from .models import AuthResponse, LoginRequest, RegisterRequest, UserPublic, UserRecord
from .security import create_access_token, get_current_user, hash_password, verify_password
from .storage import create_user, get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Auth"])


def _auth_response(user: UserRecord) -> AuthResponse:
    token, expires_at = create_access_token(user)
    return AuthResponse(user=user.public(), token=token, expiresAt=expires_at)


@router.post("/users", response_model=AuthResponse, status_code=201, summary="Register a new user")
def register(request: RegisterRequest):
    if get_user_by_email(request.email):
        raise ConflictError("Email already registered", code="USER_EXISTS")

    user = create_user(email=request.email, password_hash=hash_password(request.password))
    logger.info("registered user %s", user.id)
    return _auth_response(user)


@router.post("/auth/login", response_model=AuthResponse, summary="Login")
def login(request: LoginRequest):
    user = get_user_by_email(request.email)
    if user is None or not verify_password(request.password, user.password_hash):
        raise AuthError("Invalid email or password", code="INVALID_CREDENTIALS")
    return _auth_response(user)


@router.get("/auth/me", response_model=UserPublic, summary="Get current user")
def me(user: dict = Depends(get_current_user)):
    return UserPublic.model_validate(user)
