# -*- coding: utf-8 -*-
"""Diet plans — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from ..schema import CamelModel, StoredDocument, UpdateRequest


class Meal(CamelModel):
    time: str = Field(..., description="e.g. '8:00 AM'")
    name: str
    items: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class DietDay(CamelModel):
    day: str = Field(..., description="Label such as 'Day 1' or 'Monday'")
    meals: List[Meal] = Field(default_factory=list)


class DietPlanCreateRequest(CamelModel):
    patient_id: str = Field(..., min_length=1)
    dietitian_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    diet_days: List[DietDay] = Field(default_factory=list)
    is_active: bool = True


class DietPlanUpdateRequest(UpdateRequest):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    diet_days: Optional[List[DietDay]] = None
    is_active: Optional[bool] = None


class DietPlan(StoredDocument):
    patient_id: str
    dietitian_id: str
    title: str
    description: str = ""
    diet_days: List[DietDay] = Field(default_factory=list)
    is_active: bool = False
