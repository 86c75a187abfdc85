# -*- coding: utf-8 -*-
"""Workouts — plan and session storage (SQLite documents)."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from ..app_db import db_conn
from ..cache import TTLCache
from ..errors import NotFoundError
from .fingerprint import build_fingerprint

logger = logging.getLogger(__name__)

FEEDBACK_MAX_CHARS = 2000

PlanKey = Tuple[str, str, str]

_PLAN_SORT_COLUMNS = {"created_at": "created_at", "createdAt": "created_at"}


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _loads(raw: Optional[str], default: Any) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("skipping unreadable JSON column")
        return default


def _row_to_plan(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "userId": row["user_id"],
        "model": row["model"],
        "promptVersion": row["prompt_version"],
        "fingerprint": row["fingerprint"],
        "preWorkout": _loads(row.get("pre_workout_json"), {}),
        "plan": _loads(row.get("plan_json"), {}),
        "summary": _loads(row.get("summary_json"), None),
        "createdAt": row["created_at"],
    }


class PlanStore:
    """Generated plans keyed by (user, prompt version, fingerprint).

    Plans are immutable once written. Uniqueness of the key is best-effort: the
    recent-write cache and the pre-generation lookup narrow the window, but two
    concurrent identical requests can both insert.
    """

    def __init__(self, db_path: Path, cache: TTLCache[Dict[str, Any]]) -> None:
        self.db_path = db_path
        self.cache = cache

    @staticmethod
    def key(user_id: str, prompt_version: str, fingerprint: str) -> PlanKey:
        return (user_id, prompt_version, fingerprint)

    def create(self, document: Dict[str, Any]) -> Dict[str, Any]:
        user_id = str(document["userId"])
        prompt_version = str(document["promptVersion"])
        pre = document.get("preWorkout") or {}
        fingerprint = document.get("fingerprint") or build_fingerprint(pre)
        key = self.key(user_id, prompt_version, fingerprint)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("plan create short-circuited by cache user=%s fingerprint=%s", user_id, fingerprint[:12])
            return cached

        plan_id = document.get("id") or uuid4().hex
        created_at = document.get("createdAt") or iso_now()
        stored = {
            "id": plan_id,
            "userId": user_id,
            "model": str(document.get("model") or ""),
            "promptVersion": prompt_version,
            "fingerprint": fingerprint,
            "preWorkout": pre,
            "plan": document.get("plan") or {},
            "summary": document.get("summary"),
            "createdAt": created_at,
        }
        with db_conn(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO workout_plans (
                    id, user_id, model, prompt_version, fingerprint,
                    pre_workout_json, plan_json, summary_json, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    plan_id,
                    user_id,
                    stored["model"],
                    prompt_version,
                    fingerprint,
                    json.dumps(pre, ensure_ascii=False),
                    json.dumps(stored["plan"], ensure_ascii=False),
                    json.dumps(stored["summary"], ensure_ascii=False) if stored["summary"] is not None else None,
                    created_at,
                ),
            )
        self.cache.set(key, stored)
        logger.info("stored plan %s user=%s fingerprint=%s", plan_id, user_id, fingerprint[:12])
        return stored

    def find_by_fingerprint(self, user_id: str, prompt_version: str, fingerprint: str) -> Optional[Dict[str, Any]]:
        key = self.key(user_id, prompt_version, fingerprint)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        with db_conn(self.db_path) as conn:
            row = conn.execute(
                """
                SELECT * FROM workout_plans
                WHERE user_id = ? AND prompt_version = ? AND fingerprint = ?
                ORDER BY created_at ASC, rowid ASC
                LIMIT 1
                """,
                (user_id, prompt_version, fingerprint),
            ).fetchone()
        if not row:
            return None
        document = _row_to_plan(dict(row))
        self.cache.set(key, document)
        return document

    def find_by_id(self, plan_id: str) -> Optional[Dict[str, Any]]:
        with db_conn(self.db_path) as conn:
            row = conn.execute("SELECT * FROM workout_plans WHERE id = ?", (plan_id,)).fetchone()
        return _row_to_plan(dict(row)) if row else None

    def find(
        self,
        *,
        user_id: Optional[str] = None,
        prompt_version: Optional[str] = None,
        fingerprint: Optional[str] = None,
        sort: str = "created_at",
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        column = _PLAN_SORT_COLUMNS.get(sort)
        if column is None:
            raise ValueError(f"unsupported sort field: {sort}")
        clauses: List[str] = []
        params: List[Any] = []
        for name, value in (("user_id", user_id), ("prompt_version", prompt_version), ("fingerprint", fingerprint)):
            if value is not None:
                clauses.append(f"{name} = ?")
                params.append(value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        direction = "DESC" if descending else "ASC"
        sql = f"SELECT * FROM workout_plans {where} ORDER BY {column} {direction}, rowid {direction}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        with db_conn(self.db_path) as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_plan(dict(r)) for r in rows]


def _row_to_session(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "workoutPlanId": row["plan_id"],
        "userId": row["user_id"],
        "startedAt": row.get("started_at"),
        "completedAt": row.get("completed_at"),
        "feedback": _loads(row.get("feedback_json"), {}),
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


def clean_feedback(comment: Optional[str] = None, rating: Optional[int] = None) -> Dict[str, Any]:
    feedback: Dict[str, Any] = {}
    if comment:
        feedback["comment"] = comment[:FEEDBACK_MAX_CHARS]
    if rating is not None:
        if not 1 <= int(rating) <= 5:
            raise ValueError("rating must be between 1 and 5")
        feedback["rating"] = int(rating)
    return feedback


class SessionStore:
    """Start/completion records around a stored plan."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def create(
        self,
        *,
        plan_id: str,
        user_id: str,
        started_at: Optional[str] = None,
        completed_at: Optional[str] = None,
        feedback: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        session_id = uuid4().hex
        now = iso_now()
        with db_conn(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO workout_sessions (
                    id, plan_id, user_id, started_at, completed_at, feedback_json, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session_id,
                    plan_id,
                    user_id,
                    started_at,
                    completed_at,
                    json.dumps(feedback or {}, ensure_ascii=False),
                    now,
                    now,
                ),
            )
        return {
            "id": session_id,
            "workoutPlanId": plan_id,
            "userId": user_id,
            "startedAt": started_at,
            "completedAt": completed_at,
            "feedback": feedback or {},
            "createdAt": now,
            "updatedAt": now,
        }

    def start(self, *, plan_id: str, user_id: str) -> Dict[str, Any]:
        return self.create(plan_id=plan_id, user_id=user_id, started_at=iso_now())

    def complete(
        self,
        session_id: str,
        *,
        feedback: Optional[Dict[str, Any]] = None,
        completed_at: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Completion patch; the only update a session accepts."""
        now = iso_now()
        with db_conn(self.db_path) as conn:
            row = conn.execute("SELECT * FROM workout_sessions WHERE id = ?", (session_id,)).fetchone()
            if not row:
                raise NotFoundError("Workout session not found", code="SESSION_NOT_FOUND")
            current = dict(row)
            merged = _loads(current.get("feedback_json"), {})
            merged.update(feedback or {})
            done_at = completed_at or current.get("completed_at") or now
            conn.execute(
                "UPDATE workout_sessions SET completed_at = ?, feedback_json = ?, updated_at = ? WHERE id = ?",
                (done_at, json.dumps(merged, ensure_ascii=False), now, session_id),
            )
        current.update({"completed_at": done_at, "feedback_json": json.dumps(merged), "updated_at": now})
        return _row_to_session(current)

    def find_by_id(self, session_id: str) -> Optional[Dict[str, Any]]:
        with db_conn(self.db_path) as conn:
            row = conn.execute("SELECT * FROM workout_sessions WHERE id = ?", (session_id,)).fetchone()
        return _row_to_session(dict(row)) if row else None

    def find(
        self,
        *,
        user_id: Optional[str] = None,
        plan_id: Optional[str] = None,
        completed_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Newest completion first; sessions never completed sort last."""
        clauses: List[str] = []
        params: List[Any] = []
        if user_id is not None:
            clauses.append("user_id = ?")
            params.append(user_id)
        if plan_id is not None:
            clauses.append("plan_id = ?")
            params.append(plan_id)
        if completed_only:
            clauses.append("completed_at IS NOT NULL")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        sql = (
            f"SELECT * FROM workout_sessions {where} "
            "ORDER BY completed_at IS NULL, completed_at DESC, created_at DESC"
        )
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        with db_conn(self.db_path) as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_session(dict(r)) for r in rows]
