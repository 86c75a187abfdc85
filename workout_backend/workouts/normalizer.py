# -*- coding: utf-8 -*-
"""Workouts — set/rep normalization and the storage form of a plan.

The model sometimes returns exercises without usable set data (empty ``sets``,
or a single set for a main-block exercise). Those exercises get a synthesized
set list so that every stored exercise can be displayed and tracked.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel

from .models import GeneratedPlanDraft, PreWorkoutRequest

logger = logging.getLogger(__name__)

MAIN_BLOCK_NAME = "Main Workout"
CALORIES_PER_MINUTE = 8
DEFAULT_TEMPO = "2-1-2-1"

_COMPOUND_KEYWORDS = (
    "squat", "press", "row", "deadlift", "lunge", "pull-up", "chin",
    "push-up", "dip", "clean", "thruster",
)
_CORE_KEYWORDS = ("plank", "core", "crunch", "sit-up", "twist", "hollow", "dead bug")
_CARDIO_KEYWORDS = (
    "cardio", "hiit", "burpee", "jump", "sprint", "run", "mountain climber",
    "jumping jack", "skip", "bike", "rower",
)

_BASE_REPS = {"compound": 10, "isolation": 12, "core": 15}


@dataclass(frozen=True)
class ProgrammingOptions:
    experience: str
    primary_goal: str
    workout_type: str
    time_available: int
    equipment_level: str

    @classmethod
    def from_pre_workout(cls, pre: PreWorkoutRequest) -> "ProgrammingOptions":
        return cls(
            experience=pre.experience,
            primary_goal=pre.goals[0] if pre.goals else "general_fitness",
            workout_type=pre.workout_type,
            time_available=pre.time_available_min,
            equipment_level=equipment_level(pre.equipment_override),
        )


def equipment_level(equipment: Iterable[str]) -> str:
    items = {e.strip().lower() for e in equipment if e and e.strip()}
    if not items or items <= {"bodyweight", "none"}:
        return "minimal"
    if "full_gym" in items or "full gym" in items or len(items) >= 4:
        return "full"
    return "moderate"


def classify_exercise(name: str, role: str = "main") -> str:
    """compound | isolation | core | cardio | mobility."""
    if role in ("warmup", "cooldown"):
        return "mobility"
    lowered = (name or "").lower()
    if any(k in lowered for k in _COMPOUND_KEYWORDS):
        return "compound"
    if any(k in lowered for k in _CORE_KEYWORDS):
        return "core"
    if any(k in lowered for k in _CARDIO_KEYWORDS):
        return "cardio"
    return "isolation"


def _set(
    *,
    reps: int = 0,
    time_sec: int = 0,
    rest_sec: int,
    intensity: str,
    rpe: int,
    notes: str = "",
    weight_guidance: str = "",
    rest_type: str = "passive",
) -> Dict[str, Any]:
    return {
        "reps": reps,
        "time_sec": time_sec,
        "rest_sec": rest_sec,
        "tempo": DEFAULT_TEMPO,
        "intensity": intensity,
        "notes": notes,
        "weight_guidance": weight_guidance,
        "rpe": rpe,
        "rest_type": rest_type,
    }


def _programmed_sets(category: str) -> List[Dict[str, Any]]:
    notes = ["warm-up set", "working set", "final set"]
    weights = ["light", "moderate", "heavy"]
    out = []
    for i in range(3):
        if category == "cardio":
            dosage = {"time_sec": 30 + 10 * i}
        else:
            dosage = {"reps": 10}
        out.append(
            _set(
                **dosage,
                rest_sec=60,
                intensity="moderate",
                rpe=6 + i,
                notes=notes[i],
                weight_guidance=weights[i],
            )
        )
    return out


def _fallback_sets(category: str, role: str, exercise: Mapping[str, Any]) -> List[Dict[str, Any]]:
    edge = role in ("warmup", "cooldown")
    count = 1 if edge else 3
    rest = 30 if edge else 90
    out = []
    for i in range(count):
        if category in ("cardio", "mobility"):
            duration = int(_num(exercise.get("duration_sec")) or 30)
            dosage = {"time_sec": max(0, duration)}
        else:
            dosage = {"reps": max(5, _BASE_REPS[category] - 2 * i)}
        if edge:
            intensity = "light"
            rpe = min(9, 5 + i)
        else:
            intensity = "high" if i == count - 1 else "moderate"
            rpe = min(9, 6 + i)
        out.append(
            _set(
                **dosage,
                rest_sec=rest,
                intensity=intensity,
                rpe=rpe,
                rest_type="active" if edge else "passive",
            )
        )
    return out


def _num(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)) and math.isfinite(value):
        return float(value)
    return 0.0


def _as_dict(exercise: Any) -> Dict[str, Any]:
    if isinstance(exercise, BaseModel):
        return exercise.model_dump()
    return copy.deepcopy(dict(exercise))


def needs_sets(exercise: Mapping[str, Any], role: str) -> bool:
    sets = exercise.get("sets") or []
    return len(sets) == 0 or (len(sets) == 1 and role == "main")


def normalize_exercise(
    exercise: Any,
    role: str = "main",
    options: Optional[ProgrammingOptions] = None,
) -> Dict[str, Any]:
    """Return a copy of ``exercise`` whose ``sets`` list is populated.

    Exercises with usable sets come back unchanged. The input is never mutated.
    """
    out = _as_dict(exercise)
    if not needs_sets(out, role):
        return out

    name = str(out.get("display_name") or out.get("name") or "")
    category = classify_exercise(name, role)
    if role == "main" and options is not None:
        out["sets"] = _programmed_sets(category)
    else:
        out["sets"] = _fallback_sets(category, role, out)
    logger.debug("synthesized %d sets for %r (%s, %s)", len(out["sets"]), name, category, role)
    return out


def calculate_workout_volume(
    exercises: List[Mapping[str, Any]],
    time_available: int,
    experience: str,
) -> Dict[str, Any]:
    total_sets = 0
    total_reps = 0
    seconds = 0.0
    for exercise in exercises:
        sets = exercise.get("sets") or []
        if not sets:
            continue
        total_sets += len(sets)
        total_reps += int(sum(_num(s.get("reps")) for s in sets))
        avg_rest = sum(_num(s.get("rest_sec")) or 60 for s in sets) / len(sets)
        # 45s of work per set plus rest between sets.
        seconds += len(sets) * 45 + avg_rest * (len(sets) - 1)
    estimated = round(seconds / 60)

    recommendations: List[str] = []
    if total_sets < 12:
        recommendations.append("Consider adding 2-3 more exercises for optimal volume")
    elif total_sets > 25:
        recommendations.append("High volume workout - ensure adequate recovery")
    if experience == "beginner" and total_sets > 15:
        recommendations.append("Reduce volume for better recovery as a beginner")
    if estimated > time_available:
        recommendations.append(
            f"Workout may exceed available time ({time_available}min). Consider reducing rest periods or exercises."
        )
    return {
        "total_sets": total_sets,
        "total_reps": total_reps,
        "estimated_duration_min": estimated,
        "recommendations": recommendations,
    }


def _main_exercise(raw: Dict[str, Any], options: ProgrammingOptions) -> Dict[str, Any]:
    ex = normalize_exercise(raw, "main", options)
    ex["name"] = ex.get("display_name") or ex.get("slug") or ""
    ex["category"] = classify_exercise(ex["name"], "main")
    return ex


def _edge_section(items: List[Dict[str, Any]], role: str) -> Optional[Dict[str, Any]]:
    if not items:
        return None
    exercises = []
    for raw in items:
        ex = normalize_exercise(raw, role)
        ex["category"] = "mobility"
        exercises.append(ex)
    total_sec = sum(_num(i.get("duration_sec")) for i in items)
    return {"exercises": exercises, "duration_min": round(total_sec / 60)}


def normalize_plan(draft: GeneratedPlanDraft, pre: PreWorkoutRequest) -> Dict[str, Any]:
    """Storage form of a generated plan."""
    options = ProgrammingOptions.from_pre_workout(pre)
    raw = draft.model_dump()

    main = [_main_exercise(ex, options) for block in raw["blocks"] for ex in block["exercises"]]
    warm_up = _edge_section(raw["warmup"], "warmup")
    cool_down = _edge_section(raw["cooldown"], "cooldown")

    meta = raw["meta"]
    est_duration = int(_num(meta.get("est_duration_min")) or pre.time_available_min)
    muscles: List[str] = []
    for ex in main:
        for m in ex.get("primary_muscles") or []:
            if m not in muscles:
                muscles.append(m)
    equipment = list(meta.get("equipment_used") or []) or list(pre.equipment_override) or ["bodyweight"]
    title = meta.get("workout_name") or f"{pre.workout_type.replace('_', ' ').title()} Workout"

    return {
        "title": title,
        "description": raw.get("notes") or "",
        "blocks": [{"name": MAIN_BLOCK_NAME, "exercises": main}],
        "warm_up": warm_up,
        "cool_down": cool_down,
        "finisher": raw["finisher"],
        "meta": {
            "date_iso": meta.get("date_iso") or "",
            "session_type": meta.get("session_type") or pre.workout_type,
            "goal": meta.get("goal") or options.primary_goal,
            "workout_name": title,
            "instructions": list(meta.get("instructions") or []),
            "est_duration_min": est_duration,
            "difficulty_level": pre.experience,
            "equipment_needed": equipment,
            "muscle_groups_targeted": muscles,
            "calories_estimate": est_duration * CALORIES_PER_MINUTE,
            "volume": calculate_workout_volume(main, pre.time_available_min, pre.experience),
        },
        "notes": raw.get("notes") or "",
    }
