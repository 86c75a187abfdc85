# -*- coding: utf-8 -*-
"""Workouts — request fingerprint (dedup key)."""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, Mapping, Union

from .models import PreWorkoutRequest


def _as_mapping(pre: Union[PreWorkoutRequest, Mapping[str, Any]]) -> Mapping[str, Any]:
    if isinstance(pre, PreWorkoutRequest):
        return pre.model_dump()
    return pre


def _sorted_strings(value: Any) -> list[str]:
    if not value:
        return []
    return sorted(str(v) for v in value)


def canonical_projection(pre: Union[PreWorkoutRequest, Mapping[str, Any]]) -> Dict[str, Any]:
    """Order-insensitive view of the fields that decide what gets generated.

    Free-text injuries are not part of the key.
    """
    data = _as_mapping(pre)
    return {
        "userId": data.get("userId"),
        "workout_type": data.get("workout_type"),
        "experience": data.get("experience"),
        "time_available_min": data.get("time_available_min"),
        "goals": _sorted_strings(data.get("goals")),
        "equipment_override": _sorted_strings(data.get("equipment_override")),
    }


def build_fingerprint(pre: Union[PreWorkoutRequest, Mapping[str, Any]]) -> str:
    canonical = canonical_projection(pre)
    raw = json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
