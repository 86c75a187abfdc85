# -*- coding: utf-8 -*-
"""Auth — account models."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str) -> str:
    email = value.strip().lower()
    if not _EMAIL.match(email):
        raise ValueError("Invalid email address")
    return email


class Credentials(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        return normalize_email(value)


class RegisterRequest(Credentials):
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(Credentials):
    pass


class UserPublic(BaseModel):
    id: str
    email: str
    createdAt: str


class UserRecord(BaseModel):
    """A ``users`` row."""

    id: str
    email: str
    password_hash: str
    created_at: str

    def public(self) -> UserPublic:
        return UserPublic(id=self.id, email=self.email, createdAt=self.created_at)


class AuthResponse(BaseModel):
    user: UserPublic
    token: str
    expiresAt: int
