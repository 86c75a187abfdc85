# -*- coding: utf-8 -*-
"""
Workout generation API.

Profiles, equipment catalog, and AI-generated workout plans with
fingerprint-based deduplication.
"""

from __future__ import annotations

import logging
import os
from typing import Optional
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .app_db import init_app_db
from .auth.api import router as auth_router
from .cache import TTLCache
from .config import Settings, settings as default_settings
from .equipment.api import router as equipment_router
from .errors import install_error_handlers
from .profiles.api import router as profiles_router
from .workouts.api import router as workouts_router
from .workouts.generator import PlanGenerator
from .workouts.service import WorkoutService
from .workouts.storage import PlanStore, SessionStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, generator: Optional[PlanGenerator] = None) -> FastAPI:
    cfg = settings or default_settings

    app = FastAPI(
        title="Workout Generator",
        description="AI workout plan generation with deduplication",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=cfg.cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _request_id(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid4().hex
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    install_error_handlers(app)
    init_app_db(cfg.db_path)

    # Process-wide collaborators, built once and shared by reference.
    app.state.settings = cfg
    app.state.token_cache = TTLCache(name="tokens", maxsize=cfg.token_cache_max, ttl=cfg.token_cache_ttl_sec)
    app.state.plan_cache = TTLCache(name="plans", maxsize=cfg.plan_cache_max, ttl=cfg.plan_cache_ttl_sec)
    app.state.plan_store = PlanStore(cfg.db_path, app.state.plan_cache)
    app.state.session_store = SessionStore(cfg.db_path)
    app.state.generator = generator or PlanGenerator(cfg)
    app.state.workout_service = WorkoutService(
        app.state.plan_store,
        app.state.session_store,
        app.state.generator,
        cfg,
    )

    app.include_router(auth_router)
    app.include_router(profiles_router)
    app.include_router(equipment_router)
    app.include_router(workouts_router)

    @app.get("/api/v1/health")
    def health():
        return {"ok": True, "env": cfg.env, "promptVersion": cfg.prompt_version}

    if not cfg.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; workout generation will return 503")

    return app


app = create_app()


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    host = os.environ.get("WORKOUT_HOST") or os.environ.get("HOST") or "127.0.0.1"
    port_raw = os.environ.get("WORKOUT_PORT") or os.environ.get("PORT") or "8000"
    try:
        port = int(port_raw)
    except ValueError:
        port = 8000

    uvicorn.run("workout_backend.api:app", host=host, port=port, reload=False)
