# -*- coding: utf-8 -*-
"""AI drafting service: prompt the model, parse its JSON, cache the result."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from ..cache import CacheService
from ..errors import AIServiceError
from . import prompts
from .client import ChatModel

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def extract_json(text: str) -> Any:
    """Parse a model reply that should be JSON, tolerating code fences and chatter."""
    text = _FENCE_RE.sub("", text.strip()).strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    match = re.search(r"\{[\s\S]*\}", text)
    if not match:
        raise ValueError("No JSON object found")
    return json.loads(match.group(0))


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


class AIDraftingService:
    def __init__(self, model: ChatModel, cache: CacheService) -> None:
        self.model = model
        self.cache = cache

    async def _draft(self, op: str, failure: str, system: str, human: str, request: Dict[str, Any]) -> Any:
        key_payload = {"op": op, **request}
        cached = await self.cache.get_cached_ai_response(key_payload)
        if cached is not None:
            logger.debug("AI cache hit for %s", op)
            return cached
        try:
            reply = await self.model.invoke(
                [{"role": "system", "content": system}, {"role": "user", "content": human}]
            )
            result = extract_json(reply)
        except (httpx.HTTPError, ValueError, AIServiceError) as exc:
            logger.error("AI %s failed: %s", op, exc)
            raise AIServiceError(f"Failed to {failure}. Please try again.") from exc
        await self.cache.cache_ai_response(key_payload, result)
        return result

    async def generate_diet_plan(
        self,
        profile: Any,
        vitals: Any,
        mess_menu: Any,
        ayurvedic_principles: Optional[str] = None,
    ) -> Any:
        principles = ayurvedic_principles or "General Ayurvedic principles"
        human = prompts.DIET_PLAN_HUMAN.format(
            profile=_pretty(profile),
            vitals=_pretty(vitals),
            mess_menu=_pretty(mess_menu),
            principles=principles,
        )
        request = {"profile": profile, "vitals": vitals, "messMenu": mess_menu, "principles": principles}
        return await self._draft("diet_plan", "generate diet plan", prompts.DIET_PLAN_SYSTEM, human, request)

    async def analyze_dosha(self, symptoms: List[str], characteristics: List[str], preferences: List[str]) -> Any:
        human = prompts.DOSHA_HUMAN.format(
            symptoms=", ".join(symptoms),
            characteristics=", ".join(characteristics),
            preferences=", ".join(preferences),
        )
        request = {"symptoms": symptoms, "characteristics": characteristics, "preferences": preferences}
        return await self._draft("dosha_analysis", "analyze dosha", prompts.DOSHA_SYSTEM, human, request)

    async def suggest_alternatives(self, food_name: str, reason: str) -> Any:
        human = prompts.ALTERNATIVES_HUMAN.format(food_name=food_name, reason=reason)
        request = {"foodName": food_name, "reason": reason}
        return await self._draft(
            "food_alternatives", "suggest alternatives", prompts.ALTERNATIVES_SYSTEM, human, request
        )

    async def generate_meal_timings(self, dosha_type: str, daily_routine: str) -> Any:
        human = prompts.TIMINGS_HUMAN.format(dosha_type=dosha_type, daily_routine=daily_routine)
        request = {"doshaType": dosha_type, "dailyRoutine": daily_routine}
        return await self._draft("meal_timings", "generate meal timings", prompts.TIMINGS_SYSTEM, human, request)

    async def health_check(self) -> bool:
        try:
            reply = await self.model.invoke([{"role": "user", "content": prompts.HEALTH_CHECK}])
        except (httpx.HTTPError, ValueError, AIServiceError) as exc:
            logger.error("AI health check failed: %s", exc)
            return False
        return reply.strip() == prompts.HEALTH_CHECK_REPLY

    async def aclose(self) -> None:
        await self.model.aclose()
