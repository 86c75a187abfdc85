from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the workout generation backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.env: str = (os.environ.get("WORKOUT_ENV") or "development").strip().lower()

        self.data_root: Path = Path(
            os.environ.get("WORKOUT_DATA_ROOT") or data_root_default
        ).expanduser()
        self.db_path: Path = Path(
            os.environ.get("WORKOUT_DB_PATH") or (self.data_root / "workouts.db")
        ).expanduser()

        # In production you MUST set WORKOUT_JWT_SECRET. The dev secret keeps local runs easy.
        self.jwt_secret: str = os.environ.get("WORKOUT_JWT_SECRET") or "dev-secret-change-me"
        self.token_ttl_days: int = int(os.environ.get("WORKOUT_TOKEN_TTL_DAYS") or "7")
        self.token_cache_ttl_sec: float = float(os.environ.get("WORKOUT_TOKEN_CACHE_TTL_SEC") or "300")
        self.token_cache_max: int = int(os.environ.get("WORKOUT_TOKEN_CACHE_MAX") or "1000")

        self.plan_cache_ttl_sec: float = float(os.environ.get("WORKOUT_PLAN_CACHE_TTL_SEC") or "600")
        self.plan_cache_max: int = int(os.environ.get("WORKOUT_PLAN_CACHE_MAX") or "500")
        self.prompt_version: str = os.environ.get("WORKOUT_PROMPT_VERSION") or "v1.0.1"

        self.openai_api_key: str | None = os.environ.get("OPENAI_API_KEY")
        self.openai_base_url: str = os.environ.get(
            "OPENAI_BASE_URL", "https://api.openai.com/v1"
        )
        self.openai_model: str = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
        self.openai_timeout: float = float(os.environ.get("OPENAI_TIMEOUT", "60"))
        self.openai_max_tokens: int = int(os.environ.get("OPENAI_MAX_TOKENS", "4000"))

        cors = os.environ.get("WORKOUT_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]

    @property
    def is_development(self) -> bool:
        return self.env == "development"

    @property
    def is_production(self) -> bool:
        return self.env == "production"


settings = Settings()
