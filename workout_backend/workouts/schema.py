# -*- coding: utf-8 -*-
"""Workouts — strict JSON schema handed to the generation model."""

from __future__ import annotations

from typing import Any, Dict, List


def _string() -> Dict[str, Any]:
    return {"type": "string"}


def _number() -> Dict[str, Any]:
    return {"type": "number"}


def _strings(min_items: int | None = None, max_items: int | None = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"type": "array", "items": _string()}
    if min_items is not None:
        out["minItems"] = min_items
    if max_items is not None:
        out["maxItems"] = max_items
    return out


def _object(properties: Dict[str, Any], required: List[str] | None = None) -> Dict[str, Any]:
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": properties,
        "required": required if required is not None else list(properties),
    }


SET_SCHEMA = _object(
    {
        "reps": _number(),
        "time_sec": _number(),
        "rest_sec": _number(),
        "tempo": _string(),
        "intensity": _string(),
        "notes": _string(),
        "weight_guidance": _string(),
        "rpe": _number(),
        "rest_type": _string(),
    }
)

EXERCISE_SCHEMA = _object(
    {
        "slug": _string(),
        "display_name": _string(),
        "type": _string(),
        "equipment": _strings(),
        "primary_muscles": _strings(),
        "instructions": _strings(3, 3),
        "sets": {"type": "array", "minItems": 2, "maxItems": 6, "items": SET_SCHEMA},
    }
)

MOVEMENT_SCHEMA = _object(
    {
        "name": _string(),
        "duration_sec": _number(),
        "cues": _string(),
        "instructions": _strings(3, 3),
    }
)

WORKOUT_PLAN_JSON_SCHEMA: Dict[str, Any] = _object(
    {
        "meta": _object(
            {
                "date_iso": _string(),
                "session_type": _string(),
                "goal": _string(),
                "experience": _string(),
                "est_duration_min": _number(),
                "equipment_used": _strings(),
                "workout_name": _string(),
                "instructions": _strings(4, 4),
            }
        ),
        "warmup": {"type": "array", "items": MOVEMENT_SCHEMA},
        "blocks": {
            "type": "array",
            "items": _object({"name": _string(), "exercises": {"type": "array", "items": EXERCISE_SCHEMA}}),
        },
        "finisher": {
            "type": "array",
            "items": _object(
                {
                    "name": _string(),
                    "work_sec": _number(),
                    "rest_sec": _number(),
                    "rounds": _number(),
                    "notes": _string(),
                }
            ),
        },
        "cooldown": {"type": "array", "items": MOVEMENT_SCHEMA},
        "notes": _string(),
    }
)
