# -*- coding: utf-8 -*-
"""Consultations — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_store
from ..documents import DocumentStore
from ..envelope import ok
from .models import ConsultationCreateRequest, ConsultationStatusRequest, ConsultationUpdateRequest
from .storage import ConsultationStorage

router = APIRouter(prefix="/api/consultations", tags=["Consultations"])


def get_consultation_storage(store: DocumentStore = Depends(get_store)) -> ConsultationStorage:
    return ConsultationStorage(store)


@router.get("", summary="List consultations, newest first")
async def list_consultations(storage: ConsultationStorage = Depends(get_consultation_storage)):
    return ok([c.to_public() for c in await storage.list_consultations()])


@router.get("/patient/{patient_id}", summary="A patient's consultations")
async def list_patient_consultations(patient_id: str, storage: ConsultationStorage = Depends(get_consultation_storage)):
    return ok([c.to_public() for c in await storage.list_by_patient(patient_id)])


@router.get("/dietitian/{dietitian_id}", summary="A dietitian's consultations")
async def list_dietitian_consultations(
    dietitian_id: str,
    storage: ConsultationStorage = Depends(get_consultation_storage),
):
    return ok([c.to_public() for c in await storage.list_by_dietitian(dietitian_id)])


@router.get("/{consultation_id}", summary="Get a consultation")
async def get_consultation(consultation_id: str, storage: ConsultationStorage = Depends(get_consultation_storage)):
    consultation = await storage.get_consultation(consultation_id)
    if not consultation:
        raise HTTPException(status_code=404, detail="Consultation not found")
    return ok(consultation.to_public())


@router.post("", status_code=201, summary="Record a consultation")
async def create_consultation(
    request: ConsultationCreateRequest,
    storage: ConsultationStorage = Depends(get_consultation_storage),
):
    consultation = await storage.create_consultation(request)
    return ok(consultation.to_public(), "Consultation created")


@router.put("/{consultation_id}", summary="Update a consultation")
async def update_consultation(
    consultation_id: str,
    request: ConsultationUpdateRequest,
    storage: ConsultationStorage = Depends(get_consultation_storage),
):
    consultation = await storage.update_consultation(consultation_id, request)
    return ok(consultation.to_public(), "Consultation updated")


@router.put("/{consultation_id}/status", summary="Change a consultation's status")
async def set_consultation_status(
    consultation_id: str,
    request: ConsultationStatusRequest,
    storage: ConsultationStorage = Depends(get_consultation_storage),
):
    consultation = await storage.set_status(consultation_id, request.status)
    return ok(consultation.to_public())


@router.delete("/{consultation_id}", summary="Delete a consultation")
async def delete_consultation(consultation_id: str, storage: ConsultationStorage = Depends(get_consultation_storage)):
    await storage.delete_consultation(consultation_id)
    return ok(None, "Consultation deleted")
