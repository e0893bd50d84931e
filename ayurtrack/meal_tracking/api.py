# -*- coding: utf-8 -*-
"""Meal tracking — API endpoints."""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import get_store
from ..documents import DocumentStore
from ..envelope import ok
from .models import (
    MarkEatenRequest,
    MarkGivenRequest,
    MarkModifiedRequest,
    MealTrackingCreateRequest,
    MealTrackingUpdateRequest,
)
from .storage import MealTrackingStorage

router = APIRouter(prefix="/api/meal-tracking", tags=["Meal tracking"])


def get_meal_tracking_storage(store: DocumentStore = Depends(get_store)) -> MealTrackingStorage:
    return MealTrackingStorage(store)


@router.get("/patient/{patient_id}", summary="A patient's meal records, newest first")
async def list_patient_meals(
    patient_id: str,
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    storage: MealTrackingStorage = Depends(get_meal_tracking_storage),
):
    if (start_date is None) != (end_date is None):
        raise HTTPException(status_code=400, detail="startDate and endDate must be given together")
    if start_date is not None:
        records = await storage.list_by_date_range(patient_id, start_date, end_date)
    else:
        records = await storage.list_by_patient(patient_id)
    return ok([r.to_public() for r in records])


@router.get("/patient/{patient_id}/today", summary="Meals scheduled today")
async def list_today_meals(
    patient_id: str,
    on: date | None = Query(default=None, description="YYYY-MM-DD, defaults to today (UTC)"),
    storage: MealTrackingStorage = Depends(get_meal_tracking_storage),
):
    return ok([r.to_public() for r in await storage.list_today(patient_id, on=on)])


@router.get("/{record_id}", summary="Get a meal record")
async def get_meal(record_id: str, storage: MealTrackingStorage = Depends(get_meal_tracking_storage)):
    record = await storage.get_record(record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Meal tracking record not found")
    return ok(record.to_public())


@router.post("", status_code=201, summary="Schedule a meal")
async def create_meal(
    request: MealTrackingCreateRequest,
    storage: MealTrackingStorage = Depends(get_meal_tracking_storage),
):
    record = await storage.create_record(request)
    return ok(record.to_public(), "Meal scheduled")


@router.put("/{record_id}", summary="Update a meal record")
async def update_meal(
    record_id: str,
    request: MealTrackingUpdateRequest,
    storage: MealTrackingStorage = Depends(get_meal_tracking_storage),
):
    record = await storage.update_record(record_id, request)
    return ok(record.to_public(), "Meal record updated")


@router.post("/{record_id}/given", summary="Mark a meal as served")
async def mark_given(
    record_id: str,
    request: MarkGivenRequest,
    storage: MealTrackingStorage = Depends(get_meal_tracking_storage),
):
    record = await storage.mark_as_given(record_id, request.given_by)
    return ok(record.to_public())


@router.post("/{record_id}/eaten", summary="Record consumption")
async def mark_eaten(
    record_id: str,
    request: MarkEatenRequest,
    storage: MealTrackingStorage = Depends(get_meal_tracking_storage),
):
    record = await storage.mark_as_eaten(record_id, request.eaten_by, request.quantity)
    return ok(record.to_public())


@router.post("/{record_id}/modified", summary="Record a substituted meal")
async def mark_modified(
    record_id: str,
    request: MarkModifiedRequest,
    storage: MealTrackingStorage = Depends(get_meal_tracking_storage),
):
    record = await storage.mark_as_modified(record_id, request.notes, request.given_by)
    return ok(record.to_public())


@router.delete("/{record_id}", summary="Delete a meal record")
async def delete_meal(record_id: str, storage: MealTrackingStorage = Depends(get_meal_tracking_storage)):
    await storage.delete_record(record_id)
    return ok(None, "Meal record deleted")
