# -*- coding: utf-8 -*-
"""Auth — user rows."""

from __future__ import annotations

import sqlite3
from typing import Optional
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings
from ..errors import ConflictError
from ..workouts.storage import iso_now
from .models import UserRecord


def _fetch_one(sql: str, value: str) -> Optional[UserRecord]:
    with db_conn(settings.db_path) as conn:
        row = conn.execute(sql, (value,)).fetchone()
    return UserRecord.model_validate(dict(row)) if row else None


def get_user_by_email(email: str) -> Optional[UserRecord]:
    """``email`` is expected already normalized (see ``normalize_email``)."""
    return _fetch_one("SELECT * FROM users WHERE email = ?", email)


def get_user_by_id(user_id: str) -> Optional[UserRecord]:
    return _fetch_one("SELECT * FROM users WHERE id = ?", user_id)


def create_user(*, email: str, password_hash: str) -> UserRecord:
    user = UserRecord(id=uuid4().hex, email=email, password_hash=password_hash, created_at=iso_now())
    try:
        with db_conn(settings.db_path) as conn:
            conn.execute(
                "INSERT INTO users (id, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
                (user.id, user.email, user.password_hash, user.created_at),
            )
    except sqlite3.IntegrityError as exc:
        # Lost a race with a concurrent registration for the same email.
        raise ConflictError("Email already registered", code="USER_EXISTS") from exc
    return user
