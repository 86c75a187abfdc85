# -*- coding: utf-8 -*-
"""Workout models: request validation, generated drafts, display form."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


Experience = Literal["beginner", "intermediate", "advanced"]
Role = Literal["main", "warmup", "cooldown"]

_ANGLE_BRACKETS = re.compile(r"[<>]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_string(value: str) -> str:
    return _WHITESPACE.sub(" ", _ANGLE_BRACKETS.sub("", value.strip())).strip()


def sanitize_html(value: str) -> str:
    entities = {"<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#x27;", "&": "&amp;"}
    return re.sub(r"[<>'\"&]", lambda m: entities[m.group(0)], value)


def normalize_workout_type(value: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", value.lower())


# ---------- Requests ----------


class GenerateWorkoutRequest(BaseModel):
    experience: Experience
    goals: List[str] = Field(..., min_length=1, max_length=10)
    workoutType: str = Field(..., min_length=1, max_length=50)
    equipmentAvailable: List[str] = Field(default_factory=list, max_length=50)
    duration: int = Field(..., ge=10, le=180, description="Minutes")
    constraints: List[str] = Field(default_factory=list, max_length=20)

    @field_validator("goals")
    @classmethod
    def _goals(cls, value: List[str]) -> List[str]:
        out = []
        for goal in value:
            if not goal.strip():
                raise ValueError("Goal cannot be empty")
            if len(goal) > 100:
                raise ValueError("Goal is too long")
            out.append(sanitize_string(goal))
        return out

    @field_validator("equipmentAvailable")
    @classmethod
    def _equipment(cls, value: List[str]) -> List[str]:
        out = []
        for item in value:
            if not item.strip():
                raise ValueError("Equipment name cannot be empty")
            if len(item) > 50:
                raise ValueError("Equipment name is too long")
            out.append(sanitize_string(item))
        return out

    @field_validator("constraints")
    @classmethod
    def _constraints(cls, value: List[str]) -> List[str]:
        for item in value:
            if len(item) > 200:
                raise ValueError("Constraint is too long")
        return [sanitize_string(c) for c in value if c.strip()]


class CompleteWorkoutRequest(BaseModel):
    feedback: Optional[str] = Field(default=None, max_length=2000)
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    startedAt: Optional[str] = None
    completedAt: Optional[str] = None
    sessionId: Optional[str] = None

    @field_validator("feedback")
    @classmethod
    def _feedback(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_html(value) if value is not None else None


class PreWorkoutRequest(BaseModel):
    """Canonical generation input; embedded in the stored plan."""

    userId: str
    workout_type: str
    experience: Experience
    goals: List[str] = Field(default_factory=list)
    time_available_min: int
    equipment_override: List[str] = Field(default_factory=list)
    new_injuries: Optional[str] = None

    @field_validator("workout_type")
    @classmethod
    def _workout_type(cls, value: str) -> str:
        return normalize_workout_type(value)

    @classmethod
    def from_generate_request(cls, user_id: str, req: GenerateWorkoutRequest) -> "PreWorkoutRequest":
        return cls(
            userId=user_id,
            workout_type=req.workoutType,
            experience=req.experience,
            goals=list(req.goals),
            time_available_min=req.duration,
            equipment_override=list(req.equipmentAvailable),
            new_injuries=", ".join(req.constraints) or None,
        )


# ---------- Generated draft (model output) ----------

# NaN and Infinity parse as valid JSON numbers; a plan carrying them is unusable.
_DRAFT_CONFIG = ConfigDict(extra="ignore", allow_inf_nan=False)


class DraftSet(BaseModel):
    model_config = _DRAFT_CONFIG

    reps: float = 0
    time_sec: float = 0
    rest_sec: float = 0
    tempo: str = ""
    intensity: str = ""
    notes: str = ""
    weight_guidance: str = ""
    rpe: float = 0
    rest_type: str = ""


class DraftExercise(BaseModel):
    model_config = _DRAFT_CONFIG

    slug: str = ""
    display_name: str
    type: str = ""
    equipment: List[str] = Field(default_factory=list)
    primary_muscles: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    sets: List[DraftSet] = Field(default_factory=list)


class DraftBlock(BaseModel):
    model_config = _DRAFT_CONFIG

    name: str
    exercises: List[DraftExercise] = Field(default_factory=list)


class DraftMovement(BaseModel):
    """Warmup/cooldown item."""

    model_config = _DRAFT_CONFIG

    name: str
    duration_sec: float = 0
    cues: str = ""
    instructions: List[str] = Field(default_factory=list)


class DraftFinisher(BaseModel):
    model_config = _DRAFT_CONFIG

    name: str
    work_sec: float = 0
    rest_sec: float = 0
    rounds: float = 1
    notes: str = ""


class DraftMeta(BaseModel):
    model_config = _DRAFT_CONFIG

    date_iso: str = ""
    session_type: str = ""
    goal: str = ""
    experience: str = ""
    est_duration_min: float = 0
    equipment_used: List[str] = Field(default_factory=list)
    workout_name: str = ""
    instructions: List[str] = Field(default_factory=list)


class GeneratedPlanDraft(BaseModel):
    model_config = _DRAFT_CONFIG

    meta: DraftMeta
    warmup: List[DraftMovement]
    blocks: List[DraftBlock]
    finisher: List[DraftFinisher]
    cooldown: List[DraftMovement]
    notes: str


# ---------- Display form ----------


class DisplayExercise(BaseModel):
    """One flattened exercise entry as sent to clients.

    Defaults are what the client sees when a stored document lacks the field.
    """

    name: str = "Unknown Exercise"
    sets: int = 1
    reps: str = "10"
    duration: Optional[str] = None
    rest: Optional[str] = "60s"
    weight: Optional[str] = None
    tempo: Optional[str] = None
    intensity: Optional[str] = None
    rpe: Optional[float] = None
    restType: Optional[str] = None
    notes: Optional[str] = None
    equipment: Optional[str] = None
    primaryMuscles: Optional[str] = None
    instructions: Optional[List[str]] = None
    blockName: Optional[str] = None
    blockIndex: Optional[int] = None
    exerciseIndex: Optional[int] = None


class DisplayPlan(BaseModel):
    meta: Dict[str, Any] = Field(default_factory=dict)
    warmup: List[DisplayExercise] = Field(default_factory=list)
    exercises: List[DisplayExercise] = Field(default_factory=list)
    cooldown: List[DisplayExercise] = Field(default_factory=list)
    notes: str = ""
    estimatedDuration: Optional[float] = None


# ---------- Responses ----------


class GenerateWorkoutResponse(BaseModel):
    workoutId: str
    plan: DisplayPlan
    deduped: bool = False


class WorkoutDetailResponse(BaseModel):
    id: str
    userId: str
    model: str
    promptVersion: str
    preWorkout: Dict[str, Any]
    plan: DisplayPlan
    createdAt: str


class WorkoutHistoryItem(WorkoutDetailResponse):
    completedAt: Optional[str] = None
    feedback: Dict[str, Any] = Field(default_factory=dict)
    isCompleted: bool = True


class WorkoutListResponse(BaseModel):
    workouts: List[WorkoutHistoryItem]


class WorkoutSessionResponse(BaseModel):
    sessionId: str
    workoutPlanId: str
    startedAt: Optional[str] = None
    completedAt: Optional[str] = None
    feedback: Dict[str, Any] = Field(default_factory=dict)
