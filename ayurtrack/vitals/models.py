# -*- coding: utf-8 -*-
"""Vitals — Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import Field, model_validator

from ..schema import CamelModel, StoredDocument, UpdateRequest, UtcDatetime


class BloodPressure(CamelModel):
    systolic: float = Field(..., gt=0)
    diastolic: float = Field(..., gt=0)


class BloodSugar(CamelModel):
    fasting: float = Field(..., ge=0)
    post_prandial: Optional[float] = Field(None, ge=0)


class Thyroid(CamelModel):
    tsh: float = Field(..., ge=0)
    t3: Optional[float] = Field(None, ge=0)
    t4: Optional[float] = Field(None, ge=0)


class Cholesterol(CamelModel):
    total: float = Field(..., ge=0)
    hdl: float = Field(..., ge=0)
    ldl: float = Field(..., ge=0)
    triglycerides: float = Field(..., ge=0)


def compute_bmi(weight_kg: float, height_cm: float) -> float:
    height_m = height_cm / 100.0
    return round(weight_kg / (height_m * height_m), 1)


class VitalsCreateRequest(CamelModel):
    patient_id: str = Field(..., min_length=1)
    recorded_by: str = Field(..., min_length=1, description="Nurse/doctor id")
    date: UtcDatetime
    blood_pressure: BloodPressure
    blood_sugar: Optional[BloodSugar] = None
    thyroid: Optional[Thyroid] = None
    cholesterol: Optional[Cholesterol] = None
    weight: float = Field(..., gt=0, description="kg")
    height: float = Field(..., gt=0, description="cm")
    bmi: Optional[float] = Field(None, gt=0, description="Computed from weight/height when omitted")
    temperature: Optional[float] = None
    pulse: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def _fill_bmi(self) -> "VitalsCreateRequest":
        if self.bmi is None:
            self.bmi = compute_bmi(self.weight, self.height)
        return self


class VitalsUpdateRequest(UpdateRequest):
    nullable = frozenset({"blood_sugar", "thyroid", "cholesterol", "temperature", "pulse", "notes"})

    date: Optional[UtcDatetime] = None
    blood_pressure: Optional[BloodPressure] = None
    blood_sugar: Optional[BloodSugar] = None
    thyroid: Optional[Thyroid] = None
    cholesterol: Optional[Cholesterol] = None
    weight: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    bmi: Optional[float] = Field(None, gt=0)
    temperature: Optional[float] = None
    pulse: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)


class Vitals(StoredDocument):
    patient_id: str
    recorded_by: str
    date: UtcDatetime
    blood_pressure: BloodPressure
    blood_sugar: Optional[BloodSugar] = None
    thyroid: Optional[Thyroid] = None
    cholesterol: Optional[Cholesterol] = None
    bmi: float
    weight: float
    height: float
    temperature: Optional[float] = None
    pulse: Optional[float] = None
    notes: Optional[str] = None
