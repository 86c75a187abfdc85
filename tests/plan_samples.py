# -*- coding: utf-8 -*-
"""Model-output fixtures shared by the workout tests."""

from __future__ import annotations

import copy
from typing import Any, Dict

_INSTRUCTIONS = ["Brace before each rep", "Do not bounce at the bottom", "Slow the lowering phase"]


def _set(reps: int = 0, time_sec: int = 0, rest_sec: int = 60, notes: str = "") -> Dict[str, Any]:
    return {
        "reps": reps,
        "time_sec": time_sec,
        "rest_sec": rest_sec,
        "tempo": "3-1-2-1",
        "intensity": "moderate",
        "notes": notes,
        "weight_guidance": "moderate weight",
        "rpe": 7,
        "rest_type": "passive",
    }


_SAMPLE_DRAFT: Dict[str, Any] = {
    "meta": {
        "date_iso": "2026-01-05",
        "session_type": "upper_body",
        "goal": "strength",
        "experience": "intermediate",
        "est_duration_min": 45,
        "equipment_used": ["dumbbells", "bench"],
        "workout_name": "Upper Body Blitz",
        "instructions": ["Own every rep", "Pace the rest periods", "Swap to knees if needed", "Finish strong"],
    },
    "warmup": [
        {
            "name": "Arm Circles",
            "duration_sec": 60,
            "cues": "Small to big circles",
            "instructions": ["Arms long", "Breathe steadily", "Feel the shoulder warm up"],
        }
    ],
    "blocks": [
        {
            "name": "Strength",
            "exercises": [
                {
                    "slug": "db-bench-press",
                    "display_name": "Dumbbell Bench Press",
                    "type": "compound",
                    "equipment": ["dumbbells", "bench"],
                    "primary_muscles": ["chest", "triceps"],
                    "instructions": list(_INSTRUCTIONS),
                    "sets": [_set(reps=10, rest_sec=90, notes="Control the descent"), _set(reps=8, rest_sec=90)],
                },
                {
                    "slug": "db-row",
                    "display_name": "Dumbbell Row",
                    "type": "compound",
                    "equipment": ["dumbbells"],
                    "primary_muscles": ["lats"],
                    "instructions": list(_INSTRUCTIONS),
                    "sets": [_set(reps=12, rest_sec=60)],
                },
            ],
        },
        {
            "name": "Core",
            "exercises": [
                {
                    "slug": "plank",
                    "display_name": "Plank",
                    "type": "core",
                    "equipment": ["bodyweight"],
                    "primary_muscles": ["core"],
                    "instructions": list(_INSTRUCTIONS),
                    "sets": [_set(time_sec=45, rest_sec=30), _set(time_sec=45, rest_sec=30)],
                }
            ],
        },
    ],
    "finisher": [{"name": "Burpee Ladder", "work_sec": 40, "rest_sec": 20, "rounds": 3, "notes": ""}],
    "cooldown": [
        {
            "name": "Child's Pose",
            "duration_sec": 90,
            "cues": "Breathe deeply",
            "instructions": ["Sink the hips back", "Exhale slowly", "Let the back relax"],
        }
    ],
    "notes": "Stay hydrated.",
}


def sample_draft() -> Dict[str, Any]:
    return copy.deepcopy(_SAMPLE_DRAFT)


def chat_completion(content: str) -> Dict[str, Any]:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
    }
