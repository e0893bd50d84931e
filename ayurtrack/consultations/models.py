# -*- coding: utf-8 -*-
"""Consultations — Pydantic models."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field

from ..schema import CamelModel, StoredDocument, UpdateRequest, UtcDatetime

ConsultationStatus = Literal["scheduled", "completed", "cancelled"]


class ConsultationCreateRequest(CamelModel):
    patient_id: str = Field(..., min_length=1)
    dietitian_id: str = Field(..., min_length=1)
    date: UtcDatetime
    notes: str = ""
    recommendations: str = ""
    follow_up_date: Optional[UtcDatetime] = None
    status: ConsultationStatus = "scheduled"


class ConsultationUpdateRequest(UpdateRequest):
    nullable = frozenset({"follow_up_date"})

    date: Optional[UtcDatetime] = None
    notes: Optional[str] = None
    recommendations: Optional[str] = None
    follow_up_date: Optional[UtcDatetime] = None
    status: Optional[ConsultationStatus] = None


class ConsultationStatusRequest(CamelModel):
    status: ConsultationStatus


class Consultation(StoredDocument):
    patient_id: str
    dietitian_id: str
    date: UtcDatetime
    notes: str = ""
    recommendations: str = ""
    follow_up_date: Optional[UtcDatetime] = None
    status: ConsultationStatus
