# -*- coding: utf-8 -*-
"""Cache-aside service over Redis.

The cache is advisory: while the connection is down every read is a miss and
every write is skipped, so callers fall through to the document store.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

logger = logging.getLogger(__name__)

PATIENT_TTL = 3600
DIET_PLAN_TTL = 1800
AI_RESPONSE_TTL = 7200
NUTRITION_TTL = 86400
SESSION_TTL = 86400


def ai_cache_key(payload: Any) -> str:
    """Full-width digest of the canonical JSON form of a request payload."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)
    return "ai_response:" + hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class CacheService:
    """Redis wrapper with a liveness flag.

    A connection error clears the flag. The next operation pings once and
    resumes on success; after a failed ping the cache waits
    `reconnect_interval` seconds before trying again. Nothing is retried
    before `connect()` has been called.
    """

    def __init__(self, client: redis.Redis, *, reconnect_interval: float = 5.0) -> None:
        self.client = client
        self.reconnect_interval = reconnect_interval
        self._connected = False
        self._retry_at: Optional[float] = None

    @classmethod
    def from_url(cls, url: str) -> "CacheService":
        return cls(redis.from_url(url, decode_responses=True))

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> bool:
        if self._connected:
            return True
        try:
            await self.client.ping()
        except RedisError as exc:
            logger.error("Redis connection failed, continuing without Redis: %s", exc)
            self._connected = False
            self._retry_at = time.monotonic() + self.reconnect_interval
        else:
            logger.info("Redis connected successfully")
            self._connected = True
        return self._connected

    async def close(self) -> None:
        self._connected = False
        self._retry_at = None
        await self.client.aclose()
        logger.info("Redis disconnected")

    async def _available(self) -> bool:
        if self._connected:
            return True
        if self._retry_at is None or time.monotonic() < self._retry_at:
            return False
        try:
            await self.client.ping()
        except RedisError as exc:
            logger.warning("Redis still unavailable: %s", exc)
            self._retry_at = time.monotonic() + self.reconnect_interval
            return False
        logger.info("Redis reconnected")
        self._connected = True
        return True

    def _on_error(self, op: str, exc: RedisError) -> None:
        logger.error("Redis %s error: %s", op, exc)
        if isinstance(exc, (RedisConnectionError, RedisTimeoutError)):
            self._connected = False
            self._retry_at = time.monotonic()

    # ---- Generic operations ----

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        if not await self._available():
            return
        serialized = json.dumps(value, ensure_ascii=False)
        try:
            if ttl_seconds:
                await self.client.setex(key, ttl_seconds, serialized)
            else:
                await self.client.set(key, serialized)
        except RedisError as exc:
            self._on_error("SET", exc)

    async def get(self, key: str) -> Any:
        if not await self._available():
            return None
        try:
            raw = await self.client.get(key)
        except RedisError as exc:
            self._on_error("GET", exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    async def delete(self, key: str) -> bool:
        if not await self._available():
            return False
        try:
            return await self.client.delete(key) > 0
        except RedisError as exc:
            self._on_error("DELETE", exc)
            return False

    async def exists(self, key: str) -> bool:
        if not await self._available():
            return False
        try:
            return await self.client.exists(key) > 0
        except RedisError as exc:
            self._on_error("EXISTS", exc)
            return False

    async def clear_prefix(self, prefix: str) -> int:
        if not await self._available():
            return 0
        try:
            keys = [key async for key in self.client.scan_iter(match=f"{prefix}*")]
            if not keys:
                return 0
            return int(await self.client.delete(*keys))
        except RedisError as exc:
            self._on_error("SCAN", exc)
            return 0

    # ---- Domain helpers ----

    async def cache_patient(self, patient_id: str, data: Any) -> None:
        await self.set(f"patient:{patient_id}", data, PATIENT_TTL)

    async def get_cached_patient(self, patient_id: str) -> Any:
        return await self.get(f"patient:{patient_id}")

    async def invalidate_patient(self, patient_id: str) -> None:
        await self.delete(f"patient:{patient_id}")

    async def cache_diet_plan(self, plan_id: str, data: Any) -> None:
        await self.set(f"diet_plan:{plan_id}", data, DIET_PLAN_TTL)

    async def get_cached_diet_plan(self, plan_id: str) -> Any:
        return await self.get(f"diet_plan:{plan_id}")

    async def invalidate_diet_plan(self, plan_id: str) -> None:
        await self.delete(f"diet_plan:{plan_id}")

    async def cache_diet_plan_list(self, scope: str, data: Any) -> None:
        """`scope` is "all", "patient:<id>" or "dietitian:<id>"."""
        await self.set(f"diet_plans:{scope}", data, DIET_PLAN_TTL)

    async def get_cached_diet_plan_list(self, scope: str) -> Any:
        return await self.get(f"diet_plans:{scope}")

    async def invalidate_diet_plan_lists(self, *scopes: str) -> None:
        for scope in scopes:
            await self.delete(f"diet_plans:{scope}")

    async def cache_ai_response(self, payload: Any, response: Any) -> None:
        await self.set(ai_cache_key(payload), response, AI_RESPONSE_TTL)

    async def get_cached_ai_response(self, payload: Any) -> Any:
        return await self.get(ai_cache_key(payload))

    async def cache_nutritional_data(self, food_id: str, data: Any) -> None:
        await self.set(f"nutrition:{food_id}", data, NUTRITION_TTL)

    async def get_cached_nutritional_data(self, food_id: str) -> Any:
        return await self.get(f"nutrition:{food_id}")

    async def invalidate_nutritional_data(self, food_id: str) -> None:
        await self.delete(f"nutrition:{food_id}")

    async def set_session(self, session_id: str, data: Any) -> None:
        await self.set(f"session:{session_id}", data, SESSION_TTL)

    async def get_session(self, session_id: str) -> Any:
        return await self.get(f"session:{session_id}")

    async def delete_session(self, session_id: str) -> None:
        await self.delete(f"session:{session_id}")

    # ---- Rate limiting ----

    async def increment_rate_limit(self, identifier: str, window_seconds: int = 60) -> int:
        """Count a request; the window starts with the first request. Fails open."""
        if not await self._available():
            return 1
        key = f"rate_limit:{identifier}"
        try:
            count = int(await self.client.incr(key))
            if count == 1:
                await self.client.expire(key, window_seconds)
        except RedisError as exc:
            self._on_error("INCR", exc)
            return 1
        return count

    async def get_rate_limit(self, identifier: str) -> int:
        if not await self._available():
            return 0
        try:
            raw = await self.client.get(f"rate_limit:{identifier}")
        except RedisError as exc:
            self._on_error("GET", exc)
            return 0
        return int(raw) if raw else 0
