# -*- coding: utf-8 -*-
"""AI — drafting endpoints, rate limited per client address."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from ..cache import CacheService
from ..config import Settings
from ..deps import get_ai, get_cache, get_settings
from ..documents import utc_now
from ..envelope import fail, ok
from ..errors import AIServiceError, RateLimitExceeded
from ..schema import CamelModel
from .service import AIDraftingService

logger = logging.getLogger(__name__)


async def enforce_rate_limit(
    request: Request,
    cache: CacheService = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> None:
    client = request.client.host if request.client else "unknown"
    count = await cache.increment_rate_limit(f"ai:{client}", settings.ai_rate_window)
    if count > settings.ai_rate_limit:
        logger.warning("AI rate limit exceeded for %s (%d requests)", client, count)
        raise RateLimitExceeded("Too many AI requests, please try again later")


router = APIRouter(prefix="/api/ai", tags=["AI"], dependencies=[Depends(enforce_rate_limit)])

StrOrList = Union[List[str], str, None]


class GenerateDietRequest(CamelModel):
    patient_profile: Optional[Any] = None
    vitals: Optional[Any] = None
    mess_menu: Optional[Any] = None
    ayurvedic_principles: Optional[str] = None


class AnalyzeDoshaRequest(CamelModel):
    symptoms: StrOrList = None
    characteristics: StrOrList = None
    preferences: StrOrList = None


class SuggestAlternativesRequest(CamelModel):
    food_name: Optional[str] = None
    reason: Optional[str] = None


class GenerateTimingsRequest(CamelModel):
    dosha_type: Optional[str] = None
    daily_routine: Optional[str] = None


def _sent(*values: Any) -> bool:
    """Empty objects and arrays count as sent; null, "", 0 and false do not."""
    return all(isinstance(v, (dict, list)) or bool(v) for v in values)


def _require(*fields: str, present: bool) -> None:
    if not present:
        raise HTTPException(status_code=400, detail="Missing required fields: " + ", ".join(fields))


def _as_list(value: StrOrList) -> List[str]:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _failed(error: str, exc: AIServiceError) -> JSONResponse:
    return JSONResponse(status_code=500, content=fail(error, str(exc)))


@router.post("/generate-diet", summary="Draft a personalised Ayurvedic diet plan")
async def generate_diet(request: GenerateDietRequest, ai: AIDraftingService = Depends(get_ai)):
    _require(
        "patientProfile",
        "vitals",
        "messMenu",
        present=_sent(request.patient_profile, request.vitals, request.mess_menu),
    )
    try:
        plan = await ai.generate_diet_plan(
            request.patient_profile,
            request.vitals,
            request.mess_menu,
            request.ayurvedic_principles,
        )
    except AIServiceError as exc:
        return _failed("Failed to generate diet plan", exc)
    return ok(plan)


@router.post("/analyze-dosha", summary="Estimate the imbalanced dosha from symptoms")
async def analyze_dosha(request: AnalyzeDoshaRequest, ai: AIDraftingService = Depends(get_ai)):
    _require("symptoms", "characteristics", present=_sent(request.symptoms, request.characteristics))
    try:
        analysis = await ai.analyze_dosha(
            _as_list(request.symptoms),
            _as_list(request.characteristics),
            _as_list(request.preferences),
        )
    except AIServiceError as exc:
        return _failed("Failed to analyze dosha", exc)
    return ok(analysis)


@router.post("/suggest-alternatives", summary="Suggest Ayurvedic substitutes for a food")
async def suggest_alternatives(request: SuggestAlternativesRequest, ai: AIDraftingService = Depends(get_ai)):
    _require("foodName", "reason", present=_sent(request.food_name, request.reason))
    try:
        alternatives = await ai.suggest_alternatives(request.food_name, request.reason)
    except AIServiceError as exc:
        return _failed("Failed to suggest alternatives", exc)
    return ok(alternatives)


@router.post("/generate-timings", summary="Suggest meal timings for a constitution and routine")
async def generate_timings(request: GenerateTimingsRequest, ai: AIDraftingService = Depends(get_ai)):
    _require("doshaType", "dailyRoutine", present=_sent(request.dosha_type, request.daily_routine))
    try:
        timings = await ai.generate_meal_timings(request.dosha_type, request.daily_routine)
    except AIServiceError as exc:
        return _failed("Failed to generate timings", exc)
    return ok(timings)


@router.get("/health", summary="Ask the model for a fixed reply")
async def ai_health(ai: AIDraftingService = Depends(get_ai)):
    return {
        "success": True,
        "healthy": await ai.health_check(),
        "service": "AI Service",
        "timestamp": utc_now().isoformat(),
    }


@router.post("/cache/clear", summary="Drop cached AI responses")
async def clear_ai_cache(cache: CacheService = Depends(get_cache)):
    removed = await cache.clear_prefix("ai_response:")
    return ok({"cacheCleared": True, "keysRemoved": removed}, "AI cache cleared successfully")
