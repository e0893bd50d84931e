# -*- coding: utf-8 -*-
"""Diet plans — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..cache import CacheService
from ..deps import get_cache, get_store
from ..documents import DocumentStore
from ..envelope import ok
from .models import DietPlanCreateRequest, DietPlanUpdateRequest
from .storage import DietPlanStorage

router = APIRouter(prefix="/api/diet-plans", tags=["Diet plans"])


def get_diet_plan_storage(
    store: DocumentStore = Depends(get_store),
    cache: CacheService = Depends(get_cache),
) -> DietPlanStorage:
    return DietPlanStorage(store, cache)


@router.get("", summary="List all diet plans, newest first")
async def list_plans(storage: DietPlanStorage = Depends(get_diet_plan_storage)):
    return ok([p.to_public() for p in await storage.list_plans()])


@router.get("/patient/{patient_id}", summary="List a patient's diet plans")
async def list_patient_plans(patient_id: str, storage: DietPlanStorage = Depends(get_diet_plan_storage)):
    return ok([p.to_public() for p in await storage.list_by_patient(patient_id)])


@router.get("/patient/{patient_id}/current", summary="Get the patient's current (newest active) plan")
async def get_current_plan(patient_id: str, storage: DietPlanStorage = Depends(get_diet_plan_storage)):
    plan = await storage.get_current_plan(patient_id)
    return ok(plan.to_public() if plan else None)


@router.get("/dietitian/{dietitian_id}", summary="List plans authored by a dietitian")
async def list_dietitian_plans(dietitian_id: str, storage: DietPlanStorage = Depends(get_diet_plan_storage)):
    return ok([p.to_public() for p in await storage.list_by_dietitian(dietitian_id)])


@router.get("/{plan_id}", summary="Get a diet plan")
async def get_plan(plan_id: str, storage: DietPlanStorage = Depends(get_diet_plan_storage)):
    plan = await storage.get_plan(plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Diet plan not found")
    return ok(plan.to_public())


@router.post("", status_code=201, summary="Create a diet plan")
async def create_plan(request: DietPlanCreateRequest, storage: DietPlanStorage = Depends(get_diet_plan_storage)):
    plan = await storage.create_plan(request)
    return ok(plan.to_public(), "Diet plan created")


@router.put("/{plan_id}", summary="Update a diet plan")
async def update_plan(
    plan_id: str,
    request: DietPlanUpdateRequest,
    storage: DietPlanStorage = Depends(get_diet_plan_storage),
):
    plan = await storage.update_plan(plan_id, request)
    return ok(plan.to_public(), "Diet plan updated")


@router.delete("/{plan_id}", summary="Delete a diet plan")
async def delete_plan(plan_id: str, storage: DietPlanStorage = Depends(get_diet_plan_storage)):
    await storage.delete_plan(plan_id)
    return ok(None, "Diet plan deleted")
