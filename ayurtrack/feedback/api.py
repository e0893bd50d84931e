# -*- coding: utf-8 -*-
"""Patient feedback — API endpoints."""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import get_store
from ..documents import DocumentStore
from ..envelope import ok
from .models import FeedbackCreateRequest, FeedbackUpdateRequest
from .storage import FeedbackStorage

router = APIRouter(prefix="/api/feedback", tags=["Feedback"])


def get_feedback_storage(store: DocumentStore = Depends(get_store)) -> FeedbackStorage:
    return FeedbackStorage(store)


@router.get("/patient/{patient_id}", summary="A patient's feedback, newest first")
async def list_patient_feedback(
    patient_id: str,
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    storage: FeedbackStorage = Depends(get_feedback_storage),
):
    if (start_date is None) != (end_date is None):
        raise HTTPException(status_code=400, detail="startDate and endDate must be given together")
    if start_date is not None:
        entries = await storage.list_by_date_range(patient_id, start_date, end_date)
    else:
        entries = await storage.list_by_patient(patient_id)
    return ok([f.to_public() for f in entries])


@router.get("/patient/{patient_id}/today", summary="Feedback submitted today")
async def list_today_feedback(
    patient_id: str,
    on: date | None = Query(default=None),
    storage: FeedbackStorage = Depends(get_feedback_storage),
):
    return ok([f.to_public() for f in await storage.list_today(patient_id, on=on)])


@router.get("/{feedback_id}", summary="Get a feedback entry")
async def get_feedback(feedback_id: str, storage: FeedbackStorage = Depends(get_feedback_storage)):
    feedback = await storage.get_feedback(feedback_id)
    if not feedback:
        raise HTTPException(status_code=404, detail="Feedback not found")
    return ok(feedback.to_public())


@router.post("", status_code=201, summary="Submit feedback")
async def create_feedback(request: FeedbackCreateRequest, storage: FeedbackStorage = Depends(get_feedback_storage)):
    feedback = await storage.create_feedback(request)
    return ok(feedback.to_public(), "Feedback submitted")


@router.put("/{feedback_id}", summary="Edit feedback")
async def update_feedback(
    feedback_id: str,
    request: FeedbackUpdateRequest,
    storage: FeedbackStorage = Depends(get_feedback_storage),
):
    feedback = await storage.update_feedback(feedback_id, request)
    return ok(feedback.to_public(), "Feedback updated")


@router.delete("/{feedback_id}", summary="Delete feedback")
async def delete_feedback(feedback_id: str, storage: FeedbackStorage = Depends(get_feedback_storage)):
    await storage.delete_feedback(feedback_id)
    return ok(None, "Feedback deleted")
