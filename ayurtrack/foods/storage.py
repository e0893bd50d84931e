# -*- coding: utf-8 -*-
"""Foods — document storage; single entries are cached as nutritional data."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..cache import CacheService
from ..documents import Collections, DocumentStore, Limit, Where
from ..errors import ConflictError
from ..schema import parse_cached, parse_document, parse_documents, to_document
from .models import Food, FoodCreateRequest

logger = logging.getLogger(__name__)


class FoodStorage:
    collection = Collections.FOOD_DATABASE

    def __init__(self, store: DocumentStore, cache: CacheService) -> None:
        self.store = store
        self.cache = cache

    async def list_foods(self, limit: Optional[int] = None) -> List[Food]:
        docs = await self.store.get_all(self.collection, [Limit(limit)] if limit else [])
        return parse_documents(Food, docs, self.collection)

    async def get_food(self, food_id: str) -> Optional[Food]:
        cached = await self.cache.get_cached_nutritional_data(food_id)
        if cached is not None:
            food = parse_cached(Food, cached)
            if food is not None:
                return food
            logger.warning("Dropping stale cache entry for food %s", food_id)
            await self.cache.invalidate_nutritional_data(food_id)
        doc = await self.store.get_by_id(self.collection, food_id)
        if doc is None:
            return None
        food = parse_document(Food, doc, self.collection)
        await self.cache.cache_nutritional_data(food_id, food.to_public())
        return food

    async def get_by_code(self, code: str) -> Optional[Food]:
        docs = await self.store.get_all(self.collection, [Where("code", "==", code), Limit(1)])
        foods = parse_documents(Food, docs, self.collection)
        return foods[0] if foods else None

    async def create_food(self, request: FoodCreateRequest) -> Food:
        if await self.get_by_code(request.code) is not None:
            raise ConflictError(f"Food code {request.code} is already in use")
        doc = await self.store.create(self.collection, to_document(request))
        return parse_document(Food, doc, self.collection)

    async def search(self, query: str, limit: int = 20) -> List[Food]:
        """Case-insensitive substring match on common and scientific names."""
        needle = query.strip().lower()
        if not needle:
            return []
        hits = [
            f
            for f in await self.list_foods()
            if needle in f.name.lower() or needle in (f.scie or "").lower()
        ]
        return hits[:limit]

    async def by_nutrient_range(self, nutrient: str, low: float, high: float, limit: int = 20) -> List[Food]:
        hits = []
        for food in await self.list_foods():
            value = food.nutrient(nutrient)
            if value is not None and low <= value <= high:
                hits.append(food)
        hits.sort(key=lambda f: f.nutrient(nutrient))
        return hits[:limit]
