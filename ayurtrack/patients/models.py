# -*- coding: utf-8 -*-
"""Patients — Pydantic models."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from ..schema import CamelModel, StoredDocument, UpdateRequest, UtcDatetime

Gender = Literal["Male", "Female", "Other"]
DoshaType = Literal["Vata", "Pitta", "Kapha", "Mixed"]


class EmergencyContact(CamelModel):
    name: str
    phone: str
    relationship: str


class _PatientDetails(CamelModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    dietary_habits: Optional[str] = None
    allergies: List[str] = Field(default_factory=list)
    medical_history: Optional[str] = None
    current_medications: Optional[str] = None
    dosha_type: Optional[DoshaType] = None
    hospital_id: Optional[str] = None
    dietitian_id: Optional[str] = None
    registration_date: Optional[UtcDatetime] = None


class PatientCreateRequest(_PatientDetails):
    name: str = Field(..., min_length=1, max_length=200)
    age: int = Field(..., ge=0, le=150)
    gender: Gender
    code: Optional[str] = Field(None, min_length=3, max_length=32, description="Generated when omitted")


class PatientUpdateRequest(UpdateRequest):
    nullable = frozenset({
        "email",
        "phone",
        "address",
        "emergency_contact",
        "dietary_habits",
        "medical_history",
        "current_medications",
        "dosha_type",
    })

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Optional[Gender] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    dietary_habits: Optional[str] = None
    allergies: Optional[List[str]] = None
    medical_history: Optional[str] = None
    current_medications: Optional[str] = None
    dosha_type: Optional[DoshaType] = None


class PatientLinkRequest(CamelModel):
    hospital_id: Optional[str] = None
    dietitian_id: Optional[str] = None


class Patient(StoredDocument, _PatientDetails):
    name: str
    age: int
    gender: Gender
    code: str
