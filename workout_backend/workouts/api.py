# -*- coding: utf-8 -*-
"""Workout endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from ..auth.security import get_current_user
from ..errors import ForbiddenError
from .models import (
    CompleteWorkoutRequest,
    GenerateWorkoutRequest,
    GenerateWorkoutResponse,
    PreWorkoutRequest,
    WorkoutDetailResponse,
    WorkoutHistoryItem,
    WorkoutListResponse,
    WorkoutSessionResponse,
)
from .service import GenerationResult, WorkoutService
from .transformer import stored_to_display

router = APIRouter(prefix="/api/v1/workouts", tags=["Workouts"])


def get_workout_service(request: Request) -> WorkoutService:
    return request.app.state.workout_service


def _generation_response(result: GenerationResult, response: Response) -> GenerateWorkoutResponse:
    response.status_code = 200 if result.deduped else 201
    return GenerateWorkoutResponse(
        workoutId=result.document["id"],
        plan=result.display,
        deduped=result.deduped,
    )


def _detail(document: dict) -> WorkoutDetailResponse:
    return WorkoutDetailResponse(
        id=document["id"],
        userId=document["userId"],
        model=document.get("model") or "",
        promptVersion=document.get("promptVersion") or "",
        preWorkout=document.get("preWorkout") or {},
        plan=stored_to_display(document),
        createdAt=document.get("createdAt") or "",
    )


def _session(session: dict) -> WorkoutSessionResponse:
    return WorkoutSessionResponse(
        sessionId=session["id"],
        workoutPlanId=session["workoutPlanId"],
        startedAt=session.get("startedAt"),
        completedAt=session.get("completedAt"),
        feedback=session.get("feedback") or {},
    )


@router.post("/generate", response_model=GenerateWorkoutResponse, status_code=201, summary="Generate a workout plan")
def generate_workout(
    body: GenerateWorkoutRequest,
    response: Response,
    user: dict = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    pre = PreWorkoutRequest.from_generate_request(user["id"], body)
    return _generation_response(service.generate(pre), response)


@router.post(
    "/quick-generate",
    response_model=GenerateWorkoutResponse,
    status_code=201,
    summary="Generate a 30 minute bodyweight workout",
)
def quick_generate_workout(
    response: Response,
    user: dict = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    return _generation_response(service.quick_generate(user["id"]), response)


@router.get("", response_model=WorkoutListResponse, summary="List completed workouts")
def list_workouts(
    userId: Optional[str] = Query(default=None),
    user: dict = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    target = userId or user["id"]
    if target != user["id"]:
        raise ForbiddenError("You can only list your own workouts")

    items = []
    for entry in service.history(target):
        detail = _detail(entry["document"])
        session = entry["session"]
        items.append(
            WorkoutHistoryItem(
                **detail.model_dump(),
                completedAt=session.get("completedAt"),
                feedback=session.get("feedback") or {},
                isCompleted=True,
            )
        )
    return WorkoutListResponse(workouts=items)


@router.get("/{workout_id}", response_model=WorkoutDetailResponse, summary="Get one workout")
def get_workout(
    workout_id: str,
    user: dict = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    return _detail(service.get_owned_plan(workout_id, user["id"]))


@router.post("/{workout_id}/start", response_model=WorkoutSessionResponse, status_code=201, summary="Start a workout")
def start_workout(
    workout_id: str,
    user: dict = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    return _session(service.start(workout_id, user["id"]))


@router.post(
    "/{workout_id}/complete",
    response_model=WorkoutSessionResponse,
    status_code=201,
    summary="Record a completed workout",
)
def complete_workout(
    workout_id: str,
    body: Optional[CompleteWorkoutRequest] = None,
    user: dict = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    body = body or CompleteWorkoutRequest()
    session = service.complete(
        workout_id,
        user["id"],
        comment=body.feedback,
        rating=body.rating,
        started_at=body.startedAt,
        completed_at=body.completedAt,
        session_id=body.sessionId,
    )
    return _session(session)
