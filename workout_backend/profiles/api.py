# -*- coding: utf-8 -*-
"""Profile endpoints (owner-only)."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ..auth.security import get_current_user
from ..errors import ConflictError, ForbiddenError, NotFoundError
from .models import Profile, ProfileCreateRequest, ProfileResponse, ProfileUpdateRequest
from .storage import create_profile, get_profile, upsert_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/profile", tags=["Profile"])


def _require_owner(user: dict, user_id: str) -> None:
    if user["id"] != user_id:
        raise ForbiddenError("You can only access your own profile")


@router.post("", response_model=ProfileResponse, status_code=201, summary="Create my profile")
def create_my_profile(
    request: ProfileCreateRequest,
    user: dict = Depends(get_current_user),
):
    if get_profile(user["id"]):
        raise ConflictError("Profile already exists for this user", code="PROFILE_EXISTS")
    profile = create_profile(user["id"], request.model_dump(exclude_none=True))
    logger.info("created profile for user %s", user["id"])
    return ProfileResponse(profile=Profile.model_validate(profile))


@router.get("/{user_id}", response_model=ProfileResponse, summary="Get a profile")
def read_profile(user_id: str, user: dict = Depends(get_current_user)):
    _require_owner(user, user_id)
    profile = get_profile(user_id)
    if not profile:
        raise NotFoundError("Profile not found", code="PROFILE_NOT_FOUND")
    return ProfileResponse(profile=Profile.model_validate(profile))


@router.patch("/{user_id}", response_model=ProfileResponse, summary="Update (or create) a profile")
def patch_profile(
    user_id: str,
    request: ProfileUpdateRequest,
    user: dict = Depends(get_current_user),
):
    _require_owner(user, user_id)
    profile = upsert_profile(user_id, request.model_dump(exclude_unset=True, exclude_none=True))
    return ProfileResponse(profile=Profile.model_validate(profile))
