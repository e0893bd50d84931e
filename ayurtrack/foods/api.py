# -*- coding: utf-8 -*-
"""Foods — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ..cache import CacheService
from ..deps import get_cache, get_store
from ..documents import DocumentStore
from ..envelope import ok
from .models import FoodCreateRequest, NutrientRangeRequest
from .storage import FoodStorage

router = APIRouter(prefix="/api/foods", tags=["Foods"])


def get_food_storage(
    store: DocumentStore = Depends(get_store),
    cache: CacheService = Depends(get_cache),
) -> FoodStorage:
    return FoodStorage(store, cache)


@router.get("", summary="List foods")
async def list_foods(
    limit: int | None = Query(default=None, ge=1, le=1000),
    storage: FoodStorage = Depends(get_food_storage),
):
    return ok([f.to_public() for f in await storage.list_foods(limit)])


@router.get("/search", summary="Search foods by name")
async def search_foods(
    q: str = Query(..., min_length=1),
    limit: int = Query(default=20, ge=1, le=200),
    storage: FoodStorage = Depends(get_food_storage),
):
    return ok([f.to_public() for f in await storage.search(q, limit)])


@router.post("/nutrient-range", summary="Foods whose nutrient value lies in a range")
async def foods_by_nutrient(request: NutrientRangeRequest, storage: FoodStorage = Depends(get_food_storage)):
    if request.min > request.max:
        raise HTTPException(status_code=400, detail="min must not exceed max")
    foods = await storage.by_nutrient_range(request.nutrient, request.min, request.max, request.limit)
    return ok([f.to_public() for f in foods])


@router.get("/{food_id}", summary="Get a food entry")
async def get_food(food_id: str, storage: FoodStorage = Depends(get_food_storage)):
    food = await storage.get_food(food_id)
    if not food:
        raise HTTPException(status_code=404, detail="Food not found")
    return ok(food.to_public())


@router.post("", status_code=201, summary="Add a food entry")
async def create_food(request: FoodCreateRequest, storage: FoodStorage = Depends(get_food_storage)):
    food = await storage.create_food(request)
    return ok(food.to_public(), "Food created")
