# -*- coding: utf-8 -*-
"""Meal tracking — Pydantic models.

A record follows one meal slot on one day:
scheduled -> given -> eaten | skipped, with `modified` recording a substitution.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field

from ..schema import CamelModel, StoredDocument, UpdateRequest, UtcDatetime

MealType = Literal["breakfast", "lunch", "dinner", "snacks"]
MealStatus = Literal["scheduled", "given", "eaten", "skipped", "modified"]
EatenBy = Literal["patient", "family", "not_eaten"]
Quantity = Literal["full", "half", "quarter", "none"]


class MealTrackingCreateRequest(CamelModel):
    patient_id: str = Field(..., min_length=1)
    diet_plan_id: str = Field(..., min_length=1)
    meal_id: str = Field(..., min_length=1)
    meal_type: MealType
    scheduled_date: UtcDatetime
    notes: Optional[str] = None


class MealTrackingUpdateRequest(UpdateRequest):
    nullable = frozenset({"given_by", "given_at", "eaten_by", "eaten_at", "quantity", "notes"})

    meal_type: Optional[MealType] = None
    scheduled_date: Optional[UtcDatetime] = None
    given_by: Optional[str] = None
    given_at: Optional[UtcDatetime] = None
    eaten_by: Optional[EatenBy] = None
    eaten_at: Optional[UtcDatetime] = None
    quantity: Optional[Quantity] = None
    notes: Optional[str] = None
    status: Optional[MealStatus] = None


class MarkGivenRequest(CamelModel):
    given_by: str = Field(..., min_length=1)


class MarkEatenRequest(CamelModel):
    eaten_by: EatenBy
    quantity: Optional[Quantity] = None


class MarkModifiedRequest(CamelModel):
    notes: str = Field(..., min_length=1, description="What was served instead")
    given_by: Optional[str] = None


class MealTracking(StoredDocument):
    patient_id: str
    diet_plan_id: str
    meal_id: str
    meal_type: MealType
    scheduled_date: UtcDatetime
    given_by: Optional[str] = None
    given_at: Optional[UtcDatetime] = None
    eaten_by: Optional[EatenBy] = None
    eaten_at: Optional[UtcDatetime] = None
    quantity: Optional[Quantity] = None
    notes: Optional[str] = None
    status: MealStatus
