# -*- coding: utf-8 -*-
"""Workouts — storage/draft form -> client display form."""

from __future__ import annotations

import math
from typing import Any, List, Mapping, Optional

from .models import DisplayExercise, DisplayPlan, GeneratedPlanDraft

FINISHER_BLOCK_NAME = "Finisher"


def _num(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def _int_str(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def format_rest(seconds: Any) -> str:
    """90 -> "1m 30s", 120 -> "2m", 45 -> "45s"."""
    total = int(_num(seconds))
    if total >= 60:
        minutes, rest = divmod(total, 60)
        return f"{minutes}m {rest}s" if rest else f"{minutes}m"
    return f"{total}s"


def _opt_str(value: Any) -> Optional[str]:
    return str(value) if value else None


def _join(values: Any) -> Optional[str]:
    if not values:
        return None
    if not isinstance(values, (list, tuple)):
        return str(values)
    return ", ".join(str(v) for v in values)


def _list(values: Any) -> Optional[List[str]]:
    if not values:
        return None
    if not isinstance(values, (list, tuple)):
        return [str(values)]
    return [str(v) for v in values]


def _main_entry(exercise: Mapping[str, Any], block_name: str, block_index: int, exercise_index: int) -> DisplayExercise:
    sets = exercise.get("sets")
    if isinstance(sets, (int, float)) and not isinstance(sets, bool):
        # Legacy documents stored a bare set count.
        set_count, first = max(1, int(_num(sets))), {}
    elif isinstance(sets, list):
        set_count = len(sets) or 1
        first = sets[0] if sets and isinstance(sets[0], Mapping) else {}
    else:
        set_count, first = 1, {}

    reps = _num(first.get("reps"))
    time_sec = _num(first.get("time_sec"))
    duration: Optional[str] = None
    if reps > 0:
        reps_display = _int_str(reps)
    elif time_sec > 0:
        reps_display = "Time-based"
        duration = f"{_int_str(time_sec)}s"
    elif first:
        reps_display = "N/A"
    else:
        reps_display = str(exercise.get("reps") or "10")

    rest_sec = _num(first.get("rest_sec"))
    if rest_sec > 0:
        rest = format_rest(rest_sec)
    elif exercise.get("rest"):
        rest = str(exercise["rest"])
    else:
        rest = "60s"

    return DisplayExercise(
        name=str(exercise.get("display_name") or exercise.get("name") or "Unknown Exercise"),
        sets=set_count,
        reps=reps_display,
        duration=duration,
        rest=rest,
        weight=_opt_str(first.get("weight_guidance")),
        tempo=_opt_str(first.get("tempo")),
        intensity=_opt_str(first.get("intensity")),
        rpe=_num(first.get("rpe")) or None,
        restType=_opt_str(first.get("rest_type")) or "active",
        notes=_opt_str(first.get("notes") or exercise.get("notes")),
        equipment=_join(exercise.get("equipment")),
        primaryMuscles=_join(exercise.get("primary_muscles")),
        instructions=_list(exercise.get("instructions")),
        blockName=block_name,
        blockIndex=block_index,
        exerciseIndex=exercise_index,
    )


def _finisher_entry(item: Mapping[str, Any], block_index: int, index: int) -> DisplayExercise:
    return DisplayExercise(
        name=str(item.get("name") or "Unknown Exercise"),
        sets=max(1, int(_num(item.get("rounds")) or 1)),
        reps="Time-based",
        duration=f"{_int_str(_num(item.get('work_sec')))}s work",
        rest=format_rest(item.get("rest_sec")),
        restType="active",
        notes=_opt_str(item.get("notes")) or "High intensity finisher",
        blockName=FINISHER_BLOCK_NAME,
        blockIndex=block_index,
        exerciseIndex=index,
    )


def _edge_entry(item: Mapping[str, Any]) -> DisplayExercise:
    """Warmup/cooldown movement; shown as one timed set."""
    sets = item.get("sets") or []
    first = sets[0] if isinstance(sets, list) and sets and isinstance(sets[0], Mapping) else {}
    duration_sec = _num(item.get("duration_sec")) or _num(first.get("time_sec"))
    rest_sec = _num(first.get("rest_sec"))
    return DisplayExercise(
        name=str(item.get("name") or item.get("display_name") or "Unknown Exercise"),
        sets=1,
        reps="Time-based",
        duration=f"{_int_str(duration_sec)}s" if duration_sec else None,
        rest=format_rest(rest_sec) if rest_sec else "10s",
        notes=_opt_str(item.get("cues") or first.get("notes")),
        instructions=_list(item.get("instructions")),
    )


def _edge_items(section: Any) -> List[Mapping[str, Any]]:
    if isinstance(section, Mapping):
        section = section.get("exercises")
    if not isinstance(section, list):
        return []
    return [i for i in section if isinstance(i, Mapping)]


def _flatten(blocks: Any, finisher: Any) -> List[DisplayExercise]:
    blocks = [b for b in blocks if isinstance(b, Mapping)] if isinstance(blocks, list) else []
    finisher = finisher if isinstance(finisher, list) else []
    out: List[DisplayExercise] = []
    for block_index, block in enumerate(blocks):
        name = str(block.get("name") or "")
        exercises = block.get("exercises")
        if not isinstance(exercises, list):
            continue
        for exercise_index, exercise in enumerate(exercises):
            if isinstance(exercise, Mapping):
                out.append(_main_entry(exercise, name, block_index, exercise_index))
    # Finisher sits one past the last block index, leaving a gap after the main blocks.
    finisher_index = len(blocks) + 1
    for index, item in enumerate(finisher):
        if isinstance(item, Mapping):
            out.append(_finisher_entry(item, finisher_index, index))
    return out


def draft_to_display(draft: GeneratedPlanDraft) -> DisplayPlan:
    raw = draft.model_dump()
    meta = raw.get("meta") or {}
    return DisplayPlan(
        meta=meta,
        warmup=[_edge_entry(i) for i in _edge_items(raw.get("warmup"))],
        exercises=_flatten(raw.get("blocks"), raw.get("finisher")),
        cooldown=[_edge_entry(i) for i in _edge_items(raw.get("cooldown"))],
        notes=raw.get("notes") or "",
        estimatedDuration=_num(meta.get("est_duration_min")) or None,
    )


def plan_to_display(plan: Mapping[str, Any]) -> DisplayPlan:
    """Normalized (storage) plan -> display form.

    Tolerates partial and legacy documents: missing sections become empty and
    missing exercise fields fall back to the ``DisplayExercise`` defaults.
    """
    meta = plan.get("meta") if isinstance(plan.get("meta"), Mapping) else {}
    blocks = plan.get("blocks")
    if blocks is None and isinstance(plan.get("exercises"), list):
        # Oldest documents kept a flat exercise list.
        blocks = [{"name": "Main Workout", "exercises": plan["exercises"]}]
    warmup = plan.get("warm_up") if "warm_up" in plan else plan.get("warmup")
    cooldown = plan.get("cool_down") if "cool_down" in plan else plan.get("cooldown")
    return DisplayPlan(
        meta=dict(meta),
        warmup=[_edge_entry(i) for i in _edge_items(warmup)],
        exercises=_flatten(blocks, plan.get("finisher")),
        cooldown=[_edge_entry(i) for i in _edge_items(cooldown)],
        notes=str(plan.get("notes") or plan.get("description") or ""),
        estimatedDuration=_num(meta.get("est_duration_min")) or None,
    )


def stored_to_display(document: Mapping[str, Any]) -> DisplayPlan:
    """Stored plan document (``{"plan": {...}, ...}``) -> display form."""
    plan = document.get("plan")
    if not isinstance(plan, Mapping):
        plan = {}
    return plan_to_display(plan)

