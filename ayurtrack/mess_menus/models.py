# -*- coding: utf-8 -*-
"""Mess menus — Pydantic models."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from ..schema import CamelModel, StoredDocument, UpdateRequest, UtcDatetime

Dosha = Literal["Vata", "Pitta", "Kapha"]


class NutritionalData(CamelModel):
    calories: float = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)
    fiber: Optional[float] = Field(None, ge=0)


class AyurvedicProperties(CamelModel):
    rasa: List[str] = Field(default_factory=list, description="sweet, sour, salty, bitter, pungent, astringent")
    virya: Literal["hot", "cold"]
    guna: List[str] = Field(default_factory=list, description="heavy, light, oily, dry, ...")
    vipaka: Literal["sweet", "sour", "pungent"]
    digestibility: Literal["easy", "moderate", "difficult"]


class MessMenuItem(CamelModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    nutritional_data: Optional[NutritionalData] = None
    ayurvedic_properties: Optional[AyurvedicProperties] = None
    allergens: List[str] = Field(default_factory=list)
    suitable_for: List[Dosha] = Field(default_factory=list)


class MessMeals(CamelModel):
    breakfast: List[MessMenuItem] = Field(default_factory=list)
    lunch: List[MessMenuItem] = Field(default_factory=list)
    dinner: List[MessMenuItem] = Field(default_factory=list)
    snacks: List[MessMenuItem] = Field(default_factory=list)


class MessMenuCreateRequest(CamelModel):
    hospital_id: str = Field(..., min_length=1)
    date: UtcDatetime
    meals: MessMeals
    created_by: str = Field(..., min_length=1)
    is_active: bool = False


class MessMenuUpdateRequest(UpdateRequest):
    date: Optional[UtcDatetime] = None
    meals: Optional[MessMeals] = None


class MessMenu(StoredDocument):
    hospital_id: str
    date: UtcDatetime
    meals: MessMeals
    created_by: str
    is_active: bool = False
