# -*- coding: utf-8 -*-
"""Chat-completions client for the diet drafting model.

Talks to any OpenAI-compatible `/chat/completions` endpoint; the default base
URL is Gemini's compatibility layer.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import Settings
from ..errors import AIServiceError

logger = logging.getLogger(__name__)

Message = Dict[str, str]


class ChatModel:
    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        api_key: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 2048,
        top_p: float = 0.8,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        base_url = base_url.rstrip("/")
        self.url = base_url if base_url.endswith("/chat/completions") else f"{base_url}/chat/completions"
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_p = top_p
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ChatModel":
        return cls(
            base_url=settings.ai_base_url,
            model=settings.ai_model,
            api_key=settings.ai_api_key,
            temperature=settings.ai_temperature,
            max_tokens=settings.ai_max_tokens,
            top_p=settings.ai_top_p,
            timeout=settings.ai_timeout,
            transport=transport,
        )

    async def invoke(self, messages: List[Message]) -> str:
        """Send the conversation and return the first choice's text."""
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
        }
        resp = await self._client.post(self.url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AIServiceError("Model response has no message content") from exc
        if not isinstance(content, str):
            raise AIServiceError("Model response content is not text")
        return content

    async def aclose(self) -> None:
        await self._client.aclose()
