# -*- coding: utf-8 -*-
"""Workouts — generation pipeline.

fingerprint -> dedup lookup -> compose prompt -> generate -> normalize -> persist.
Every step runs in order inside the calling request; nothing is speculative.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..config import Settings
from ..errors import ForbiddenError, NotFoundError, ValidationFailed
from .fingerprint import build_fingerprint
from .generator import GenerationOptions, PlanGenerator
from .models import DisplayPlan, PreWorkoutRequest
from .normalizer import normalize_plan
from .prompt import compose_prompt
from .storage import PlanStore, SessionStore, clean_feedback, iso_now
from .transformer import plan_to_display, stored_to_display

logger = logging.getLogger(__name__)

QUICK_DEFAULTS: Dict[str, Any] = {
    "workout_type": "general_fitness",
    "equipment_override": ["bodyweight"],
    "time_available_min": 30,
    "experience": "intermediate",
    "goals": ["general_fitness"],
}

HISTORY_LIMIT = 20


@dataclass
class GenerationResult:
    document: Dict[str, Any]
    deduped: bool
    display: DisplayPlan


def quick_pre_workout(user_id: str) -> PreWorkoutRequest:
    return PreWorkoutRequest(userId=user_id, **QUICK_DEFAULTS)


class WorkoutService:
    def __init__(
        self,
        plans: PlanStore,
        sessions: SessionStore,
        generator: PlanGenerator,
        settings: Settings,
    ) -> None:
        self.plans = plans
        self.sessions = sessions
        self.generator = generator
        self.settings = settings

    @property
    def prompt_version(self) -> str:
        return self.settings.prompt_version

    def generate(self, pre: PreWorkoutRequest) -> GenerationResult:
        fingerprint = build_fingerprint(pre)
        existing = self.plans.find_by_fingerprint(pre.userId, self.prompt_version, fingerprint)
        if existing is not None:
            logger.info("dedup hit user=%s plan=%s", pre.userId, existing["id"])
            return GenerationResult(document=existing, deduped=True, display=stored_to_display(existing))

        prompt = compose_prompt(pre)
        options = GenerationOptions(
            workout_type=pre.workout_type,
            experience=pre.experience,
            duration=pre.time_available_min,
        )
        draft = self.generator.generate(prompt, options)
        plan = normalize_plan(draft, pre)
        # Rendered before the write; an unrenderable plan is never stored.
        display = plan_to_display(plan)

        document = self.plans.create(
            {
                "userId": pre.userId,
                "model": self.generator.model,
                "promptVersion": self.prompt_version,
                "fingerprint": fingerprint,
                "preWorkout": pre.model_dump(),
                "plan": plan,
                "summary": {
                    "title": plan["title"],
                    "est_duration_min": plan["meta"]["est_duration_min"],
                    "exercise_count": len(plan["blocks"][0]["exercises"]),
                    "variant": prompt.variant,
                },
            }
        )
        if document["plan"] is not plan:
            # A concurrent identical request won the write; show what was stored.
            display = stored_to_display(document)
        return GenerationResult(document=document, deduped=False, display=display)

    def quick_generate(self, user_id: str) -> GenerationResult:
        return self.generate(quick_pre_workout(user_id))

    def get_owned_plan(self, plan_id: str, user_id: str) -> Dict[str, Any]:
        document = self.plans.find_by_id(plan_id)
        if document is None:
            raise NotFoundError("Workout not found", code="WORKOUT_NOT_FOUND")
        if document["userId"] != user_id:
            raise ForbiddenError("You do not have access to this workout")
        return document

    def history(self, user_id: str, limit: int = HISTORY_LIMIT) -> List[Dict[str, Any]]:
        """Plans the user completed, newest completion first."""
        out: List[Dict[str, Any]] = []
        for session in self.sessions.find(user_id=user_id, completed_only=True, limit=limit):
            document = self.plans.find_by_id(session["workoutPlanId"])
            if document is None:
                continue
            out.append({"document": document, "session": session})
        return out

    def start(self, plan_id: str, user_id: str) -> Dict[str, Any]:
        self.get_owned_plan(plan_id, user_id)
        return self.sessions.start(plan_id=plan_id, user_id=user_id)

    def complete(
        self,
        plan_id: str,
        user_id: str,
        *,
        comment: Optional[str] = None,
        rating: Optional[int] = None,
        started_at: Optional[str] = None,
        completed_at: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        self.get_owned_plan(plan_id, user_id)
        try:
            feedback = clean_feedback(comment, rating)
        except ValueError as exc:
            raise ValidationFailed(str(exc), details=[{"field": "rating", "message": str(exc)}]) from exc
        if session_id:
            session = self.sessions.find_by_id(session_id)
            if session is None or session["workoutPlanId"] != plan_id:
                raise NotFoundError("Workout session not found", code="SESSION_NOT_FOUND")
            if session["userId"] != user_id:
                raise ForbiddenError("You do not have access to this session")
            return self.sessions.complete(session_id, feedback=feedback, completed_at=completed_at)
        return self.sessions.create(
            plan_id=plan_id,
            user_id=user_id,
            started_at=started_at,
            completed_at=completed_at or iso_now(),
            feedback=feedback,
        )