# -*- coding: utf-8 -*-
"""Patient feedback — Pydantic models."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from ..schema import CamelModel, StoredDocument, UpdateRequest, UtcDatetime

Digestion = Literal["excellent", "good", "fair", "poor", "very_poor"]
OverallFeeling = Literal["much_better", "better", "same", "worse", "much_worse"]


class MealAdherence(CamelModel):
    breakfast: bool = False
    lunch: bool = False
    dinner: bool = False
    snacks: bool = False


class _FeedbackBody(CamelModel):
    meal_adherence: MealAdherence
    symptoms: List[str] = Field(default_factory=list)
    energy_level: int = Field(..., ge=1, le=5, description="1 = very low, 5 = excellent")
    digestion: Digestion
    water_intake: int = Field(..., ge=0, description="Glasses per day")
    sleep_quality: int = Field(..., ge=1, le=5, description="1 = very poor, 5 = excellent")
    overall_feeling: OverallFeeling
    additional_notes: Optional[str] = None


class FeedbackCreateRequest(_FeedbackBody):
    patient_id: str = Field(..., min_length=1)
    diet_plan_id: str = Field(..., min_length=1)
    date: Optional[UtcDatetime] = None


class FeedbackUpdateRequest(UpdateRequest):
    nullable = frozenset({"additional_notes"})

    meal_adherence: Optional[MealAdherence] = None
    symptoms: Optional[List[str]] = None
    energy_level: Optional[int] = Field(None, ge=1, le=5)
    digestion: Optional[Digestion] = None
    water_intake: Optional[int] = Field(None, ge=0)
    sleep_quality: Optional[int] = Field(None, ge=1, le=5)
    overall_feeling: Optional[OverallFeeling] = None
    additional_notes: Optional[str] = None


class PatientFeedback(StoredDocument, _FeedbackBody):
    patient_id: str
    diet_plan_id: str
    date: UtcDatetime
