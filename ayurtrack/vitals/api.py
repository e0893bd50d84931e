# -*- coding: utf-8 -*-
"""Vitals — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_store
from ..documents import DocumentStore
from ..envelope import ok
from .models import VitalsCreateRequest, VitalsUpdateRequest
from .storage import VitalsStorage

router = APIRouter(prefix="/api/vitals", tags=["Vitals"])


def get_vitals_storage(store: DocumentStore = Depends(get_store)) -> VitalsStorage:
    return VitalsStorage(store)


@router.get("/patient/{patient_id}", summary="List a patient's vitals, newest first")
async def list_patient_vitals(patient_id: str, storage: VitalsStorage = Depends(get_vitals_storage)):
    return ok([v.to_public() for v in await storage.list_by_patient(patient_id)])


@router.get("/patient/{patient_id}/latest", summary="Latest vitals for a patient")
async def latest_vitals(patient_id: str, storage: VitalsStorage = Depends(get_vitals_storage)):
    record = await storage.get_latest(patient_id)
    return ok(record.to_public() if record else None)


@router.get("/{vitals_id}", summary="Get a vitals record")
async def get_vitals(vitals_id: str, storage: VitalsStorage = Depends(get_vitals_storage)):
    record = await storage.get_record(vitals_id)
    if not record:
        raise HTTPException(status_code=404, detail="Vitals record not found")
    return ok(record.to_public())


@router.post("", status_code=201, summary="Record vitals")
async def create_vitals(request: VitalsCreateRequest, storage: VitalsStorage = Depends(get_vitals_storage)):
    record = await storage.create_record(request)
    return ok(record.to_public(), "Vitals recorded")


@router.put("/{vitals_id}", summary="Correct a vitals record")
async def update_vitals(
    vitals_id: str,
    request: VitalsUpdateRequest,
    storage: VitalsStorage = Depends(get_vitals_storage),
):
    record = await storage.update_record(vitals_id, request)
    return ok(record.to_public(), "Vitals updated")


@router.delete("/{vitals_id}", summary="Delete a vitals record")
async def delete_vitals(vitals_id: str, storage: VitalsStorage = Depends(get_vitals_storage)):
    await storage.delete_record(vitals_id)
    return ok(None, "Vitals deleted")
