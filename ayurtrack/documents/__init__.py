# -*- coding: utf-8 -*-
"""Document store adapter.

Services talk to `DocumentStore`; the backend is chosen by DOCUMENT_BACKEND.
"""

from __future__ import annotations

from ..config import Settings
from .base import (
    Constraint,
    Document,
    DocumentCallback,
    DocumentStore,
    Limit,
    OrderBy,
    Unsubscribe,
    Where,
    coerce_datetime,
    day_bounds,
    query_with_index_fallback,
    sort_by_date_desc,
    utc_now,
)
from .sqlite import SqliteDocumentStore


class Collections:
    PATIENTS = "patients"
    DIET_PLANS = "dietPlans"
    MESS_MENUS = "messMenus"
    VITALS = "vitals"
    CONSULTATIONS = "consultations"
    MEAL_TRACKING = "mealTracking"
    PATIENT_FEEDBACK = "patientFeedback"
    USERS = "users"
    HOSPITALS = "hospitals"
    FOOD_DATABASE = "foodDatabase"


def create_document_store(settings: Settings) -> DocumentStore:
    if settings.document_backend == "firestore":
        from .firestore import FirestoreDocumentStore

        return FirestoreDocumentStore.from_settings(settings)
    if settings.document_backend == "sqlite":
        return SqliteDocumentStore(settings.db_path)
    raise ValueError(f"Unknown DOCUMENT_BACKEND: {settings.document_backend}")


__all__ = [
    "Collections",
    "Constraint",
    "Document",
    "DocumentCallback",
    "DocumentStore",
    "Limit",
    "OrderBy",
    "SqliteDocumentStore",
    "Unsubscribe",
    "Where",
    "coerce_datetime",
    "create_document_store",
    "day_bounds",
    "query_with_index_fallback",
    "sort_by_date_desc",
    "utc_now",
]
