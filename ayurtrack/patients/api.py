# -*- coding: utf-8 -*-
"""Patients — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ..cache import CacheService
from ..deps import get_cache, get_store
from ..documents import DocumentStore
from ..envelope import ok
from .models import PatientCreateRequest, PatientLinkRequest, PatientUpdateRequest
from .storage import PatientStorage

router = APIRouter(prefix="/api/patients", tags=["Patients"])


def get_patient_storage(
    store: DocumentStore = Depends(get_store),
    cache: CacheService = Depends(get_cache),
) -> PatientStorage:
    return PatientStorage(store, cache)


@router.get("", summary="List patients")
async def list_patients(
    dietitian_id: str | None = Query(default=None, alias="dietitianId"),
    hospital_id: str | None = Query(default=None, alias="hospitalId"),
    storage: PatientStorage = Depends(get_patient_storage),
):
    patients = await storage.list_patients(dietitian_id=dietitian_id, hospital_id=hospital_id)
    return ok([p.to_public() for p in patients])


@router.get("/code/{code}", summary="Look up a patient by code")
async def get_patient_by_code(code: str, storage: PatientStorage = Depends(get_patient_storage)):
    patient = await storage.get_by_code(code)
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")
    return ok(patient.to_public())


@router.get("/{patient_id}", summary="Get a patient")
async def get_patient(patient_id: str, storage: PatientStorage = Depends(get_patient_storage)):
    patient = await storage.get_patient(patient_id)
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")
    return ok(patient.to_public())


@router.post("", status_code=201, summary="Register a patient")
async def create_patient(request: PatientCreateRequest, storage: PatientStorage = Depends(get_patient_storage)):
    patient = await storage.create_patient(request)
    return ok(patient.to_public(), "Patient registered")


@router.put("/{patient_id}", summary="Update a patient")
async def update_patient(
    patient_id: str,
    request: PatientUpdateRequest,
    storage: PatientStorage = Depends(get_patient_storage),
):
    patient = await storage.update_patient(patient_id, request)
    return ok(patient.to_public(), "Patient updated")


@router.put("/{patient_id}/link", summary="Link a patient to a hospital and/or dietitian")
async def link_patient(
    patient_id: str,
    request: PatientLinkRequest,
    storage: PatientStorage = Depends(get_patient_storage),
):
    if not request.hospital_id and not request.dietitian_id:
        raise HTTPException(status_code=400, detail="Missing required fields: hospitalId or dietitianId")
    patient = await storage.link_patient(patient_id, request)
    return ok(patient.to_public(), "Patient linked")


@router.delete("/{patient_id}", summary="Delete a patient")
async def delete_patient(patient_id: str, storage: PatientStorage = Depends(get_patient_storage)):
    await storage.delete_patient(patient_id)
    return ok(None, "Patient deleted")
