# -*- coding: utf-8 -*-
"""Profiles — SQLite storage (one JSON payload per user)."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..app_db import db_conn
from ..config import settings


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _row_to_profile(row: Dict[str, Any]) -> Dict[str, Any]:
    payload = json.loads(row.get("payload_json") or "{}")
    payload["userId"] = row["user_id"]
    payload["createdAt"] = row["created_at"]
    payload["updatedAt"] = row["updated_at"]
    return payload


def get_profile(user_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.db_path) as conn:
        row = conn.execute("SELECT * FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
    return _row_to_profile(dict(row)) if row else None


def create_profile(user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    now = _iso_now()
    with db_conn(settings.db_path) as conn:
        conn.execute(
            "INSERT INTO profiles (user_id, payload_json, created_at, updated_at) VALUES (?, ?, ?, ?)",
            (user_id, json.dumps(payload, ensure_ascii=False), now, now),
        )
    return {**payload, "userId": user_id, "createdAt": now, "updatedAt": now}


def upsert_profile(user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``changes`` into the stored payload, creating the row if needed."""
    now = _iso_now()
    with db_conn(settings.db_path) as conn:
        row = conn.execute("SELECT * FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
        if row:
            current = dict(row)
            payload = json.loads(current.get("payload_json") or "{}")
            payload.update(changes)
            created_at = current["created_at"]
            conn.execute(
                "UPDATE profiles SET payload_json = ?, updated_at = ? WHERE user_id = ?",
                (json.dumps(payload, ensure_ascii=False), now, user_id),
            )
        else:
            payload = dict(changes)
            created_at = now
            conn.execute(
                "INSERT INTO profiles (user_id, payload_json, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (user_id, json.dumps(payload, ensure_ascii=False), now, now),
            )
    return {**payload, "userId": user_id, "createdAt": created_at, "updatedAt": now}
