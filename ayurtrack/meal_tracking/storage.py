# -*- coding: utf-8 -*-
"""Meal tracking — document storage and status transitions.

The transitions do not check the current status: marking a `scheduled` meal
as eaten is accepted, and nothing moves a record back to `scheduled`.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, List, Optional

from ..documents import (
    Collections,
    DocumentStore,
    OrderBy,
    Unsubscribe,
    Where,
    day_bounds,
    query_with_index_fallback,
    utc_now,
)
from ..errors import NotFoundError
from ..schema import parse_document, parse_documents, to_document
from .models import (
    EatenBy,
    MealTracking,
    MealTrackingCreateRequest,
    MealTrackingUpdateRequest,
    Quantity,
)


def eaten_status(quantity: Optional[Quantity]) -> str:
    return "skipped" if quantity == "none" else "eaten"


class MealTrackingStorage:
    collection = Collections.MEAL_TRACKING

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def _query(self, constraints: list) -> List[MealTracking]:
        docs = await query_with_index_fallback(self.store, self.collection, constraints)
        return parse_documents(MealTracking, docs, self.collection)

    async def list_by_patient(self, patient_id: str) -> List[MealTracking]:
        return await self._query([Where("patientId", "==", patient_id), OrderBy("scheduledDate")])

    async def list_by_date_range(self, patient_id: str, start: datetime, end: datetime) -> List[MealTracking]:
        return await self._query(
            [
                Where("patientId", "==", patient_id),
                Where("scheduledDate", ">=", start),
                Where("scheduledDate", "<=", end),
                OrderBy("scheduledDate"),
            ]
        )

    async def list_today(self, patient_id: str, *, on: Optional[date] = None) -> List[MealTracking]:
        start, end = day_bounds(on or utc_now().date())
        return await self._query(
            [
                Where("patientId", "==", patient_id),
                Where("scheduledDate", ">=", start),
                Where("scheduledDate", "<", end),
            ]
        )

    async def get_record(self, record_id: str) -> Optional[MealTracking]:
        doc = await self.store.get_by_id(self.collection, record_id)
        return parse_document(MealTracking, doc, self.collection) if doc else None

    async def create_record(self, request: MealTrackingCreateRequest) -> MealTracking:
        data = to_document(request)
        data["status"] = "scheduled"
        doc = await self.store.create(self.collection, data)
        return parse_document(MealTracking, doc, self.collection)

    async def _write(self, record_id: str, data: dict) -> MealTracking:
        await self.store.update(self.collection, record_id, data)
        record = await self.get_record(record_id)
        if record is None:
            raise NotFoundError(self.collection, record_id)
        return record

    async def update_record(self, record_id: str, request: MealTrackingUpdateRequest) -> MealTracking:
        return await self._write(record_id, to_document(request, partial=True))

    async def mark_as_given(self, record_id: str, given_by: str) -> MealTracking:
        return await self._write(
            record_id,
            {"givenBy": given_by, "givenAt": utc_now(), "status": "given"},
        )

    async def mark_as_eaten(
        self,
        record_id: str,
        eaten_by: EatenBy,
        quantity: Optional[Quantity] = None,
    ) -> MealTracking:
        data = {"eatenBy": eaten_by, "eatenAt": utc_now(), "status": eaten_status(quantity)}
        if quantity is not None:
            data["quantity"] = quantity
        return await self._write(record_id, data)

    async def mark_as_modified(self, record_id: str, notes: str, given_by: Optional[str] = None) -> MealTracking:
        """Record that a substitute was served in place of the planned meal."""
        data = {"notes": notes, "status": "modified"}
        if given_by:
            data.update(givenBy=given_by, givenAt=utc_now())
        return await self._write(record_id, data)

    async def delete_record(self, record_id: str) -> None:
        await self.store.delete(self.collection, record_id)

    def subscribe(
        self,
        patient_id: str,
        callback: Callable[[List[MealTracking]], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Unsubscribe:
        return self.store.subscribe(
            self.collection,
            [Where("patientId", "==", patient_id), OrderBy("scheduledDate")],
            lambda docs: callback(parse_documents(MealTracking, docs, self.collection)),
            on_error,
        )
