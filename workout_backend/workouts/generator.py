# -*- coding: utf-8 -*-
"""Workouts — plan generation via an OpenAI-compatible chat completions API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..errors import UpstreamError
from .models import GeneratedPlanDraft
from .prompt import SYSTEM_PERSONA, ComposedPrompt
from .schema import WORKOUT_PLAN_JSON_SCHEMA

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 200


@dataclass(frozen=True)
class GenerationOptions:
    workout_type: str = ""
    experience: str = ""
    duration: int = 0


def sampling_parameters(options: GenerationOptions) -> Tuple[float, float]:
    """(temperature, top_p); rules are applied in order, later rules win."""
    temperature = 0.2
    top_p = 0.9
    wt = options.workout_type or ""
    if "conditioning" in wt or "hiit" in wt:
        temperature = 0.3
    if options.experience == "advanced":
        temperature = 0.25
        top_p = 0.85
    if options.duration and options.duration > 60:
        temperature = 0.15
    return temperature, top_p


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number in model output: {name}")


def _preview(text: str) -> str:
    return text.replace("\n", " ").strip()[:_PREVIEW_CHARS]


def _extract_content(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if isinstance(message, dict):
        content = message.get("content")
        if isinstance(content, str):
            return content
    return ""


def _status_error(status: int, body: str) -> UpstreamError:
    detail = {"upstream_status": status, "body": _preview(body)}
    if status == 429:
        return UpstreamError("AI service is busy. Please try again shortly.", code="RATE_LIMIT_ERROR", detail=detail)
    if status in (401, 403):
        return UpstreamError(
            "AI service is temporarily unavailable. Please try again.",
            code="AI_SERVICE_AUTH_ERROR",
            detail=detail,
        )
    if status >= 500:
        return UpstreamError(
            "AI service is temporarily unavailable. Please try again.",
            code="AI_SERVICE_UNAVAILABLE",
            detail=detail,
        )
    return UpstreamError("Failed to generate workout plan", code="AI_SERVICE_ERROR", detail=detail)


class PlanGenerator:
    """One outbound model call per ``generate``; no retries at this layer."""

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None) -> None:
        self.settings = settings
        self.model = settings.openai_model
        self._client = client

    def _endpoint(self) -> str:
        return f"{self.settings.openai_base_url.rstrip('/')}/chat/completions"

    def build_payload(self, prompt: ComposedPrompt, options: GenerationOptions) -> Dict[str, Any]:
        temperature, top_p = sampling_parameters(options)
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PERSONA},
                {"role": "user", "content": prompt.prompt},
            ],
            "temperature": temperature,
            "top_p": top_p,
            "max_tokens": self.settings.openai_max_tokens,
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": "workout_plan",
                    "schema": WORKOUT_PLAN_JSON_SCHEMA,
                    "strict": True,
                },
            },
        }

    def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self.settings.openai_api_key}",
            "Content-Type": "application/json",
        }
        if self._client is not None:
            return self._client.post(self._endpoint(), headers=headers, json=payload, timeout=self.settings.openai_timeout)
        with httpx.Client(timeout=self.settings.openai_timeout, follow_redirects=True) as client:
            return client.post(self._endpoint(), headers=headers, json=payload)

    def generate(self, prompt: ComposedPrompt, options: GenerationOptions) -> GeneratedPlanDraft:
        if not self.settings.openai_api_key:
            raise UpstreamError(
                "AI service is not configured",
                code="AI_SERVICE_UNAVAILABLE",
                detail={"reason": "missing OPENAI_API_KEY"},
            )

        payload = self.build_payload(prompt, options)
        logger.info(
            "generating workout plan model=%s type=%s experience=%s duration=%s temperature=%s",
            self.model,
            options.workout_type,
            options.experience,
            options.duration,
            payload["temperature"],
        )

        try:
            resp = self._post(payload)
        except httpx.TimeoutException as exc:
            logger.warning("workout generation timed out after %ss", self.settings.openai_timeout)
            raise UpstreamError(
                "Workout generation timed out. Please try again.",
                code="TIMEOUT_ERROR",
                status_code=408,
                detail={"exception": repr(exc)},
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("workout generation transport error: %s", exc)
            raise UpstreamError(
                "AI service is temporarily unavailable. Please try again.",
                code="AI_SERVICE_UNAVAILABLE",
                detail={"exception": repr(exc)},
            ) from exc

        if resp.status_code >= 400:
            err = _status_error(resp.status_code, resp.text or "")
            logger.warning("workout generation failed code=%s upstream_status=%s", err.code, resp.status_code)
            raise err

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError(
                "Failed to generate workout plan",
                code="AI_SERVICE_ERROR",
                detail={"body": _preview(resp.text or ""), "exception": repr(exc)},
            ) from exc

        text = _extract_content(data)
        if not text.strip():
            logger.warning("workout generation returned no content")
            raise UpstreamError(
                "AI service returned no content. Please try again.",
                code="AI_SERVICE_UNAVAILABLE",
                detail={"response": _preview(json.dumps(data, ensure_ascii=False, default=str))},
            )

        try:
            parsed = json.loads(text, parse_constant=_reject_constant)
        except ValueError as exc:
            logger.warning("model returned non-JSON output: %s", _preview(text))
            raise UpstreamError(
                "Failed to generate workout plan",
                code="AI_SERVICE_ERROR",
                detail={"raw_text": text, "exception": repr(exc)},
            ) from exc

        try:
            draft = GeneratedPlanDraft.model_validate(parsed)
        except ValidationError as exc:
            logger.warning("model output failed schema validation: %s", _preview(text))
            raise UpstreamError(
                "Failed to generate workout plan",
                code="AI_SERVICE_ERROR",
                detail={"raw_text": text, "exception": str(exc)},
            ) from exc

        logger.info(
            "generated workout plan exercises=%d est_duration_min=%s",
            sum(len(b.exercises) for b in draft.blocks),
            draft.meta.est_duration_min,
        )
        return draft
